class CollectionError(Exception):
    """A collector could not complete its cycle; the scrape drops its series."""


class SourceUnavailableError(CollectionError):
    pass


class MalformedPressureError(CollectionError):
    pass
