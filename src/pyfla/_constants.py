"""Internal constants shared across the library."""

BASE_URL = "https://owner-api.teslamotors.com/api/1"
STREAMING_URL = "wss://streaming.vn.teslamotors.com/streaming/"
USER_AGENT = "pyfla"

API_PREFIX = "/api/1"
STREAMING_PATH = "/streaming/"

#: Pseudo endpoint of ``vehicle_data`` that releases drive_state coordinates.
LOCATION_DATA_ENDPOINT = "location_data"

#: Vehicle ids the simulator knows about unless configured otherwise.
DEFAULT_VEHICLE_IDS: tuple[int, ...] = (999_456_789, 999_456_000)

#: Charge limit bounds accepted by ``set_charge_limit``.
CHARGE_LIMIT_MIN = 50
CHARGE_LIMIT_MAX = 100

#: Streaming field aliases used by the manufacturer's telemetry feed.
STREAMING_ALIASES: dict[str, str] = {
    "soc": "charge_state.battery_level",
    "range": "charge_state.battery_range",
    "est_range": "charge_state.est_battery_range",
    "odometer": "vehicle_state.odometer",
    "est_lat": "drive_state.latitude",
    "est_lng": "drive_state.longitude",
    "est_heading": "drive_state.heading",
    "heading": "drive_state.heading",
    "speed": "drive_state.speed",
    "power": "drive_state.power",
    "shift_state": "drive_state.shift_state",
    "elevation": "drive_state.elevation",
}
