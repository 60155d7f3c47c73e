class BaseMongoDslException(Exception):
    pass


class InvalidSettingsError(BaseMongoDslException, KeyError):
    """ Unknown execution settings were given to a builder """

    def __init__(self, builder: str, setting_names):
        self.builder = builder
        self.setting_names = sorted(setting_names)

        super(InvalidSettingsError, self).__init__(
            'Invalid execution settings for {builder}: {names}'.format(
                builder=builder,
                names=', '.join(self.setting_names))
        )

    def __str__(self):
        # KeyError.__str__() would repr() the message
        return self.args[0]


class UnserializableValueError(BaseMongoDslException, TypeError):
    """ A value could not be converted into a document """

    def __init__(self, value, where: str):
        self.value = value
        self.where = where

        super(UnserializableValueError, self).__init__(
            'Cannot convert {type} into a document in {where}'.format(
                type=type(value).__name__,
                where=where)
        )
