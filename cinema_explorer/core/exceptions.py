class CinemaError(Exception):
    """Base exception for all cinema_explorer errors"""
    pass

class ConfigError(CinemaError):
    """Invalid or inconsistent global.json / database config"""
    pass

class DatasetLoadError(CinemaError):
    """
    The primary table of a database could not be fetched at all
    (missing data.csv, unreadable file, bad encoding)
    """
    pass
