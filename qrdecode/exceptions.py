class InputError(ValueError):
    """
    The input blob could not be turned into a usable image: bad base64,
    an unreadable container, or an empty or oversized picture.
    """
