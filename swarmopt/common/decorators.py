# Copyright (c) Facebook, Inc. and its affiliates. All Rights Reserved.
#
# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

import typing as tp
import functools
from . import errors


X = tp.TypeVar("X")


class Registry(tp.MutableMapping[str, X]):
    """Registers functions by name, each along with a dict of information
    (eg: the solver settings an objective preset is demonstrated with).

    Parameters
    ----------
    info_keys: iterable of str or None
        if provided, the only keys allowed in the information of a registered function,
        so that a misspelled setting fails at registration time
    """

    def __init__(self, info_keys: tp.Optional[tp.Iterable[str]] = None) -> None:
        super().__init__()
        self.data: tp.Dict[str, X] = {}
        self._info_keys = None if info_keys is None else set(info_keys)
        self._information: tp.Dict[str, tp.Dict[str, tp.Any]] = {}

    def register(self, obj: X, info: tp.Optional[tp.Dict[str, tp.Any]] = None) -> X:
        """Decorator method for registering functions under their name"""
        name: str = getattr(obj, "__name__")
        if name in self:
            raise errors.SwarmRuntimeError(f'Name "{name}" is already registered')
        info = {} if info is None else dict(info)
        if self._info_keys is not None:
            unknown = set(info) - self._info_keys
            if unknown:
                raise errors.SwarmValueError(
                    f"Unknown information {sorted(unknown)} for {name} (allowed: {sorted(self._info_keys)})"
                )
        self.data[name] = obj
        self._information[name] = info
        return obj

    def register_with_info(self, **info: tp.Any) -> tp.Callable[[X], X]:
        """Decorator for registering a function along with information about it"""
        return functools.partial(self.register, info=info)

    def get_info(self, name: str) -> tp.Dict[str, tp.Any]:
        """Returns a copy of the information registered with the name"""
        if name not in self:
            raise errors.SwarmValueError(f'"{name}" is not registered (choose among {sorted(self)})')
        return dict(self._information[name])

    def __getitem__(self, key: str) -> X:
        return self.data[key]

    def __setitem__(self, key: str, value: X) -> None:
        if key != getattr(value, "__name__", None):
            raise errors.SwarmValueError(f"Registered name must match the function name ({key} given)")
        self.register(value)

    def __delitem__(self, key: str) -> None:
        del self.data[key]
        del self._information[key]

    def __iter__(self) -> tp.Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)
