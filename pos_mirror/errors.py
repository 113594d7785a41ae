class MirrorError(Exception):
    pass


class EnvelopeError(MirrorError):
    """Raised for wire messages that are not valid envelopes."""


class CartError(MirrorError):
    pass


class OrderNotFound(MirrorError):
    def __init__(self, order_id: str):
        super().__init__(f"order not found: {order_id}")
        self.order_id = order_id
