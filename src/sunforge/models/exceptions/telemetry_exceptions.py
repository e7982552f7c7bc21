class TelemetryStoreException(Exception):
    pass
