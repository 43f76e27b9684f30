from __future__ import annotations


STRESSOR_RULES = {
    "pressure": {
        "label": "Water Pressure",
        "meaning": (
            "Supply pressure above 80 PSI flexes the tank on every heating cycle, "
            "fatiguing welds and the glass lining."
        ),
        "remedy": "Install or repair a pressure reducing valve",
    },
    "temperature": {
        "label": "Thermostat Setting",
        "meaning": (
            "A hot setting speeds up corrosion and mineral precipitation inside the tank."
        ),
        "remedy": "Lower the dial to the normal setting",
    },
    "sediment": {
        "label": "Sediment / Scale",
        "meaning": (
            "Mineral buildup insulates the heat source, causing hot spots in tanks "
            "and restricted flow through tankless heat exchangers."
        ),
        "remedy": "Flush the tank or descale the heat exchanger",
    },
    "circulation": {
        "label": "Recirculation Pump",
        "meaning": (
            "A pump running around the clock keeps water moving through the heater "
            "and multiplies wear on the anode and fittings."
        ),
        "remedy": "Add a timer or on-demand control to the pump",
    },
    "closed_loop": {
        "label": "Thermal Expansion",
        "meaning": (
            "In a closed system without a working expansion tank, heated water has nowhere "
            "to go and pressure spikes on every burn cycle."
        ),
        "remedy": "Install or replace the thermal expansion tank",
    },
    "usage": {
        "label": "Usage Intensity",
        "meaning": (
            "Large households and heavy draw patterns cycle the heater more often than "
            "its rated duty."
        ),
        "remedy": "Consider a larger-capacity unit at replacement time",
    },
    "galvanic": {
        "label": "Galvanic Connection",
        "meaning": (
            "Copper threaded directly onto steel nipples forms a battery that eats the "
            "connection and the tank from the outside in."
        ),
        "remedy": "Install dielectric unions",
    },
    "hardness": {
        "label": "Water Hardness",
        "meaning": (
            "Hard water deposits scale faster and shortens the life of heating surfaces."
        ),
        "remedy": "Consider a water softener",
    },
}


FLAG_RULES = {
    "TANK_BODY_LEAK": {
        "title": "Tank Failure Detected",
        "meaning": "Water is leaking from the tank body. The inner vessel has failed and cannot be repaired.",
    },
    "CONTAINMENT_BREACH": {
        "title": "Containment Breach",
        "meaning": "Rust on the tank body indicates the steel vessel has corroded through.",
    },
    "GALVANIC_CORROSION": {
        "title": "Galvanic Corrosion",
        "meaning": "Active corrosion at an unprotected copper-to-steel joint threatens the tank connections.",
    },
    "VENT_BLOCKED": {
        "title": "Blocked Exhaust Vent",
        "meaning": "A blocked vent can push combustion gases into the living space.",
    },
    "VESSEL_FATIGUE": {
        "title": "Vessel Fatigue",
        "meaning": "Years of pressure above 100 PSI without regulation have fatigued the tank walls.",
    },
    "SEDIMENT_LOCKOUT": {
        "title": "Sediment Lockout",
        "meaning": "Sediment has hardened past the point where a flush can safely remove it.",
    },
    "SCALE_LOCKOUT": {
        "title": "Heat Exchanger Scaled",
        "meaning": "Scale has built up past the point where descaling restores the heat exchanger.",
    },
    "END_OF_SERVICE_LIFE": {
        "title": "End of Service Life",
        "meaning": "The unit is past the expected service life for tankless heaters.",
    },
    "CHRONIC_ERRORS": {
        "title": "Chronic Error Codes",
        "meaning": "The unit logs error codes often enough that repairs are no longer economical.",
    },
    "FITTING_LEAK": {
        "title": "Leaking Fitting",
        "meaning": "A fitting or valve is leaking. The tank itself is intact and the leak can be repaired.",
    },
    "FAILED_PRV": {
        "title": "Failed PRV",
        "meaning": "The pressure reducing valve is installed but no longer regulating pressure.",
    },
    "HIGH_PRESSURE": {
        "title": "High Water Pressure",
        "meaning": "Supply pressure exceeds the 80 PSI plumbing code limit with no regulation.",
    },
    "MISSING_EXPANSION_TANK": {
        "title": "Missing Expansion Tank",
        "meaning": "The plumbing is a closed loop but there is no expansion tank to absorb thermal expansion.",
    },
    "WATERLOGGED_EXPANSION_TANK": {
        "title": "Waterlogged Expansion Tank",
        "meaning": "The expansion tank bladder has failed and no longer absorbs thermal expansion.",
    },
    "UNPROTECTED_CONNECTION": {
        "title": "Unprotected Connection",
        "meaning": "Copper lines connect directly to steel nipples without dielectric protection.",
    },
    "MISSING_DRAIN_PAN": {
        "title": "Missing Drain Pan",
        "meaning": "A heater in a finished or high-risk location requires a drain pan.",
    },
    "ERROR_CODES": {
        "title": "Error Codes Logged",
        "meaning": "The unit has logged error codes that point to a component needing service.",
    },
    "VENT_RESTRICTED": {
        "title": "Restricted Vent",
        "meaning": "Exhaust venting is partially restricted and reduces combustion efficiency.",
    },
    "AIR_FILTER_SERVICE": {
        "title": "Air Filter Service",
        "meaning": "A dirty heat pump filter starves the compressor of airflow.",
    },
    "LOW_HEAT_PUMP_CAPACITY": {
        "title": "Low Heat Pump Capacity",
        "meaning": "The compressor is delivering less heat than rated, often from a low refrigerant charge.",
    },
    "COMPRESSOR_DEGRADED": {
        "title": "Compressor Degraded",
        "meaning": "The heat pump compressor is failing and the unit is leaning on its backup elements.",
    },
    "INLET_FILTER_SERVICE": {
        "title": "Inlet Filter Service",
        "meaning": "Debris on the inlet screen restricts flow and can trip low-flow errors.",
    },
    "CONDENSATE_BLOCKED": {
        "title": "Condensate Blocked",
        "meaning": "The condensate drain is blocked and can overflow into the surrounding area.",
    },
    "NO_ISOLATION_VALVES": {
        "title": "No Isolation Valves",
        "meaning": "Without isolation valves the heat exchanger cannot be descaled.",
    },
    "DESCALE_DUE": {
        "title": "Descale Due",
        "meaning": "Scale buildup in the heat exchanger calls for a descale.",
    },
    "UNCONTROLLED_RECIRCULATION": {
        "title": "Recirculation Tuning",
        "meaning": "The recirculation pump runs continuously and cycles the unit excessively.",
    },
    "FLUSH_DUE": {
        "title": "Flush Due",
        "meaning": "Sediment has accumulated since the last flush.",
    },
    "FLUSH_RISKY": {
        "title": "Maintenance Risk",
        "meaning": "A flush is due but the tank is old enough that disturbing the sediment may expose pinholes.",
    },
    "DESCALE_RISKY": {
        "title": "Run to Failure",
        "meaning": "The unit has never been descaled in hard water and is too calcified to descale safely. Monitor for leaks.",
    },
    "ANODE_DEPLETED": {
        "title": "Anode Depleted",
        "meaning": "The sacrificial anode is used up and the tank lining is no longer protected.",
    },
}


def interpret_stressor(name: str) -> dict[str, str]:
    """
    Return interpretation metadata for a stress factor.
    """
    return STRESSOR_RULES.get(
        name,
        {
            "label": name,
            "meaning": "No interpretation rule defined for this factor.",
            "remedy": "None",
        },
    )


def interpret_flag(flag: str) -> dict[str, str]:
    return FLAG_RULES.get(
        flag,
        {
            "title": flag.replace("_", " ").title(),
            "meaning": "No interpretation rule defined for this condition.",
        },
    )
