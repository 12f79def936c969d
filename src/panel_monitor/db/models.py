"""SQL table definitions."""

SCHEMA_VERSION = 1

TABLES = [
    # ── Schema tracking ─────────────────────────────────────
    """
    CREATE TABLE IF NOT EXISTS schema_version (
        id      INTEGER PRIMARY KEY CHECK (id = 1),
        version INTEGER NOT NULL
    )
    """,

    # ── Panel readings ──────────────────────────────────────
    # recorded_at is a UTC ISO-8601 string; lexical order == time order.
    """
    CREATE TABLE IF NOT EXISTS panel_readings (
        id                  INTEGER PRIMARY KEY AUTOINCREMENT,
        panel_id            TEXT NOT NULL,
        recorded_at         TEXT NOT NULL,
        voltage_r           REAL NOT NULL DEFAULT 0,
        voltage_s           REAL NOT NULL DEFAULT 0,
        voltage_t           REAL NOT NULL DEFAULT 0,
        current_r           REAL NOT NULL DEFAULT 0,
        current_s           REAL NOT NULL DEFAULT 0,
        current_t           REAL NOT NULL DEFAULT 0,
        apparent_power_r    REAL NOT NULL DEFAULT 0,
        apparent_power_s    REAL NOT NULL DEFAULT 0,
        apparent_power_t    REAL NOT NULL DEFAULT 0,
        energy_kvah         REAL NOT NULL DEFAULT 0,
        net_kw              REAL NOT NULL DEFAULT 0,
        net_kva             REAL NOT NULL DEFAULT 0,
        frequency_hz        REAL,
        power_factor        REAL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_readings_panel_time ON panel_readings(panel_id, recorded_at)",
]

READING_COLUMNS = (
    "voltage_r", "voltage_s", "voltage_t",
    "current_r", "current_s", "current_t",
    "apparent_power_r", "apparent_power_s", "apparent_power_t",
    "energy_kvah", "net_kw", "net_kva",
    "frequency_hz", "power_factor",
)
