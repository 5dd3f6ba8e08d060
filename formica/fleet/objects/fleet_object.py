import json


class FleetObject(object):
    """A base class for representing the objects sent to, and returned by fleet

    Raises:
        AttributeError: You attempted to write to a read only properly / key

    This class stores a dict in self._data and provides access to it via keys and properties.

        >>> fo = FleetObject(data={'foo': 'bar'})
        >>> fo.foo
        'bar'
        >>> fo['foo']
        'bar'

    Once the data is set in the constructor, it cannot be overwritten without using methods to do so.

    >>> fo.foo = 'baz'
    AttributeError: FleetObject.foo can not be modified

    """
    def __init__(self, data=None):
        """
        Args:
            data (dict, optional): Initialize this object with this data

        """

        self._update('_data', data if data is not None else {})

    def _update(self, name, value):
        """Uses the parent object's method to bypass our write protection and update ourselves

        Args:
            name (str): The attribute to set/update
            value: The value to assign to the attribute

        """
        return object.__setattr__(self, name, value)

    # Ensure we can be accessed via property or keys
    def __contains__(self, name):
        return name in self._data

    def __getitem__(self, name):
        return self._data[name]

    def __getattr__(self, name):
        # private names are never looked up in the data, this keeps copy and pickle
        # from recursing before _data exists
        if name.startswith('_'):
            raise AttributeError(name)

        try:
            return self._data[name]
        except KeyError:
            raise AttributeError('{0} has no attribute {1}'.format(
                self.__class__.__name__,
                name
            ))

    def get(self, name, default=None):
        """Return the value of ``name`` or ``default`` if fleet did not send it"""
        return self._data.get(name, default)

    # Ensure our properties cannot be written to directly
    def __setitem__(self, name, value):
        return self.__setattr__(name, value)

    def __setattr__(self, name, value):
        raise AttributeError('{0}.{1} can not be modified'.format(
            self.__class__.__name__,
            name
        ))

    def __str__(self):
        return json.dumps(self.as_dict(), default=str)

    def __repr__(self):
        return '<{0}: {1}>'.format(
            self.__class__.__name__,
            str(self)
        )

    def as_dict(self):
        """Return the internal data structure backing this object"""
        return dict(self._data)
