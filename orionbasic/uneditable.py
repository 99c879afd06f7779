from typing import Any


def uneditable(cls: Any):
    """Seals instances of a class once ``__init__`` has returned.

    Attributes assigned during construction become read-only afterwards,
    so a settings object handed to an interpreter session can't drift
    while a program is running.

    Args:
        cls (Any): The class to be decorated.

    Raises:
        TypeError: If an attribute is assigned after construction.
        TypeError: If an attribute is deleted after construction.

    Returns:
        type: The same class with sealing installed.
    """
    orig_init = cls.__init__
    orig_setattr, orig_delattr = cls.__setattr__, cls.__delattr__

    def __init__(self, *args, **kwargs) -> None:
        object.__setattr__(self, "_sealed", False)
        orig_init(self, *args, **kwargs)
        object.__setattr__(self, "_sealed", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_sealed", False):
            raise TypeError(f"'{type(self).__name__}' is read-only, can't set {name!r}")
        return orig_setattr(self, name, value)

    def __delattr__(self, name: str) -> None:
        if getattr(self, "_sealed", False):
            raise TypeError(f"'{type(self).__name__}' is read-only, can't delete {name!r}")
        return orig_delattr(self, name)

    cls.__init__ = __init__
    cls.__setattr__ = __setattr__
    cls.__delattr__ = __delattr__
    return cls


__all__ = ["uneditable"]
