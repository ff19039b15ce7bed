# spotfeed/core/exceptions.py


class SpotfeedError(Exception):
    """Base class for errors raised by the feed engine."""


class TrailFormatError(SpotfeedError, ValueError):
    """A location trail could not be decoded."""


class PlaceNotFoundError(SpotfeedError):
    def __init__(self, kind, place_id):
        super().__init__(f"{kind} {place_id} not found")
        self.kind = kind
        self.place_id = place_id
