"""Domain errors raised by the services and mapped to HTTP responses by the routers."""


class BidValidationError(ValueError):
    """A submitted field is missing or malformed. Nothing has been written."""


class ImportHeaderError(BidValidationError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing headers: {', '.join(missing)}")


class BidNotFoundError(LookupError):
    def __init__(self, bid_id: str):
        self.bid_id = bid_id
        super().__init__("Bid not found")


class UserValidationError(ValueError):
    pass


class UserNotFoundError(LookupError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__("User not found")
