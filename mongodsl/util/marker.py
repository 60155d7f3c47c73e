class _ABSENT_TYPE:
    """ A falsy marker to be used for arguments not provided to a function

        Builders omit a key entirely when its argument is ABSENT,
        while `None` is a value like any other and ends up in the document.
    """

    __slots__ = ()

    def __repr__(self):
        return '-'

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


ABSENT = _ABSENT_TYPE()
