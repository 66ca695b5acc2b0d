"""Initial ``vehicle_data`` payload for a freshly created simulated vehicle."""

from __future__ import annotations

from typing import Any

from pyfla.models.vehicle import OnlineState, VehicleState

#: Miles of rated range per percent of battery.
RANGE_PER_PERCENT = 3.19
#: Usable pack capacity used for ``charge_energy_added``.
PACK_CAPACITY_KWH = 75.0

DEFAULT_BATTERY_LEVEL = 42
DEFAULT_LATITUDE = 37.7765494
DEFAULT_LONGITUDE = -122.4195418


def default_vehicle_payload(vehicle_id: int, timestamp_ms: int) -> dict[str, Any]:
    """Raw wire payload of a parked, asleep vehicle."""
    battery_range = round(DEFAULT_BATTERY_LEVEL * RANGE_PER_PERCENT, 2)
    return {
        "id": vehicle_id,
        "user_id": 800_001,
        "vehicle_id": vehicle_id,
        "vin": f"TESTVIN{vehicle_id:010d}",
        "display_name": f"Simulated {vehicle_id}",
        "color": None,
        "access_type": "OWNER",
        "tokens": ["4f993c5b9e2b937b", "7a3153b1bbb48a96"],
        "state": OnlineState.ASLEEP.value,
        "in_service": False,
        "id_s": str(vehicle_id),
        "calendar_enabled": True,
        "api_version": 54,
        "backseat_token": None,
        "backseat_token_updated_at": None,
        "charge_state": {
            "battery_heater_on": False,
            "battery_level": DEFAULT_BATTERY_LEVEL,
            "battery_range": battery_range,
            "est_battery_range": battery_range,
            "ideal_battery_range": battery_range,
            "usable_battery_level": DEFAULT_BATTERY_LEVEL,
            "charge_amps": 48,
            "charge_current_request": 48,
            "charge_current_request_max": 48,
            "charge_enable_request": True,
            "charge_energy_added": 0.0,
            "charge_limit_soc": 90,
            "charge_limit_soc_max": 100,
            "charge_limit_soc_min": 50,
            "charge_limit_soc_std": 90,
            "charge_miles_added_ideal": 0,
            "charge_miles_added_rated": 0,
            "charge_port_cold_weather_mode": False,
            "charge_port_door_open": False,
            "charge_port_latch": "Engaged",
            "charge_rate": 0,
            "charger_actual_current": 0,
            "charger_phases": None,
            "charger_pilot_current": 48,
            "charger_power": 0,
            "charger_voltage": 2,
            "charging_state": "Disconnected",
            "conn_charge_cable": "<invalid>",
            "fast_charger_present": False,
            "fast_charger_brand": "<invalid>",
            "managed_charging_active": False,
            "managed_charging_start_time": None,
            "minutes_to_full_charge": 0,
            "scheduled_charging_pending": False,
            "scheduled_charging_start_time": None,
            "time_to_full_charge": 0.0,
            "timestamp": timestamp_ms,
            "usable_battery_level_percent_source": "bms",
            "user_charge_enable_request": None,
        },
        "climate_state": {
            "auto_seat_climate_left": False,
            "auto_seat_climate_right": False,
            "battery_heater": False,
            "battery_heater_no_power": None,
            "cabin_overheat_protection": "On",
            "cabin_overheat_protection_actively_cooling": False,
            "climate_keeper_mode": "off",
            "defrost_mode": 0,
            "driver_temp_setting": 21.0,
            "fan_status": 0,
            "inside_temp": 38.4,
            "is_auto_conditioning_on": False,
            "is_climate_on": False,
            "is_front_defroster_on": False,
            "is_preconditioning": False,
            "is_rear_defroster_on": False,
            "max_avail_temp": 28.0,
            "min_avail_temp": 15.0,
            "outside_temp": 36.5,
            "passenger_temp_setting": 21.0,
            "seat_heater_left": 0,
            "seat_heater_right": 0,
            "steering_wheel_heat_level": 0,
            "timestamp": timestamp_ms,
        },
        "drive_state": {
            "active_route_latitude": DEFAULT_LATITUDE,
            "active_route_longitude": DEFAULT_LONGITUDE,
            "active_route_traffic_minutes_delay": 0,
            "gps_as_of": timestamp_ms // 1000,
            "elevation": 0,
            "heading": 0,
            "latitude": DEFAULT_LATITUDE,
            "longitude": DEFAULT_LONGITUDE,
            "native_latitude": DEFAULT_LATITUDE,
            "native_location_supported": 1,
            "native_longitude": DEFAULT_LONGITUDE,
            "native_type": "wgs",
            "power": 0,
            "shift_state": None,
            "speed": None,
            "timestamp": timestamp_ms,
        },
        "gui_settings": {
            "gui_24_hour_time": False,
            "gui_charge_rate_units": "mi/hr",
            "gui_distance_units": "mi/hr",
            "gui_range_display": "Rated",
            "gui_temperature_units": "F",
            "gui_tirepressure_units": "Psi",
            "show_range_units": False,
            "timestamp": timestamp_ms,
        },
        "vehicle_config": {
            "aux_park_lamps": "NaPremium",
            "badge_version": 0,
            "can_accept_navigation_requests": True,
            "can_actuate_trunks": True,
            "car_special_type": "base",
            "car_type": "modely",
            "charge_port_type": "US",
            "driver_assist": "TeslaAP3",
            "eu_vehicle": False,
            "exterior_color": "MidnightSilver",
            "exterior_trim": "Black",
            "has_air_suspension": False,
            "has_ludicrous_mode": False,
            "key_version": 2,
            "motorized_charge_port": True,
            "performance_package": "Base",
            "plg": True,
            "pws": True,
            "rear_seat_heaters": 1,
            "rear_seat_type": 0,
            "rhd": False,
            "roof_color": "RoofColorGlass",
            "seat_type": None,
            "spoiler_type": "None",
            "sun_roof_installed": None,
            "third_row_seats": "None",
            "timestamp": timestamp_ms,
            "trim_badging": "74d",
            "utc_offset": -25200,
            "wheel_type": "Apollo19",
        },
        "vehicle_state": {
            "api_version": 54,
            "car_version": "2023.7.20 7910d26d5c64",
            "center_display_state": 0,
            "df": 0,
            "dr": 0,
            "fd_window": 0,
            "fp_window": 0,
            "ft": 0,
            "homelink_device_count": 3,
            "homelink_nearby": False,
            "is_user_present": False,
            "locked": True,
            "odometer": 0.0,
            "pf": 0,
            "pr": 0,
            "rd_window": 0,
            "remote_start": False,
            "rp_window": 0,
            "rt": 0,
            "sentry_mode": False,
            "sentry_mode_available": True,
            "timestamp": timestamp_ms,
            "valet_mode": False,
            "vehicle_name": f"sim-{vehicle_id}",
            "vehicle_self_test_progress": 0,
        },
    }


def default_vehicle_state(vehicle_id: int, timestamp_ms: int) -> VehicleState:
    return VehicleState.parse(default_vehicle_payload(vehicle_id, timestamp_ms))
