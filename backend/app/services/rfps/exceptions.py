"""RFP and bid domain exceptions."""

from app.services.exceptions import NotFoundError, ValidationError


class RfpNotFound(NotFoundError):
    """RFP not found or not visible to the current user."""

    pass


class RfpNotOpen(ValidationError):
    """Bids can only be placed on open RFPs."""

    pass


class BidNotFound(NotFoundError):
    """Bid not found or not visible to the current user."""

    pass


class BidNotOnRfp(ValidationError):
    """The selected bid was not placed on this RFP."""

    pass
