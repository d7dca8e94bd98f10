class NotFoundError(LookupError):
    """Requested row does not exist or is not visible to visitors"""

    def __init__(self, entity: str, ref=None):
        self.entity = entity
        self.ref = ref
        super().__init__(f"{entity} not found" if ref is None else f"{entity} '{ref}' not found")


class InvalidInputError(ValueError):
    """Request passed schema validation but breaks a business rule"""
