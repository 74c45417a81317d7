"""
Observer pattern and lazy recalculation.

Observables keep a list of weak references to their observers and send a
single payload-free update() when they change. A LazyObject only marks
itself dirty on update() and forwards the notification; the actual
recalculation runs on the next read through calculate().

Nothing here is synchronized: mutate quotes and read dependents from one
thread, or lock externally around set_value / update / calculate.
"""

import logging
import weakref
from typing import List, Optional

logger = logging.getLogger(__name__)


class Observable:
    """Object that notifies registered observers when it changes."""

    def __init__(self):
        self._observer_refs: List[weakref.ref] = []

    def register_observer(self, observer: "Observer") -> None:
        for ref in self._observer_refs:
            if ref() is observer:
                return
        self._observer_refs.append(weakref.ref(observer))

    def unregister_observer(self, observer: "Observer") -> None:
        self._observer_refs = [
            ref for ref in self._observer_refs
            if ref() is not None and ref() is not observer
        ]

    @property
    def observer_count(self) -> int:
        return sum(1 for ref in self._observer_refs if ref() is not None)

    def notify_observers(self) -> None:
        """Send update() to every live observer, dropping dead references."""
        live = []
        for ref in self._observer_refs:
            observer = ref()
            if observer is not None:
                live.append(ref)
        self._observer_refs = live
        for ref in list(live):
            observer = ref()
            if observer is not None:
                observer.update()


class Observer:
    """Object that reacts to update() from the observables it registered with."""

    def register_with(self, observable: Optional[Observable]) -> None:
        if observable is not None:
            observable.register_observer(self)

    def unregister_with(self, observable: Optional[Observable]) -> None:
        if observable is not None:
            observable.unregister_observer(self)

    def update(self) -> None:
        raise NotImplementedError


class Quote(Observable):
    """Observable scalar market value."""

    def value(self) -> float:
        raise NotImplementedError

    def is_valid(self) -> bool:
        return True


class SimpleQuote(Quote):
    """
    Quote holding a settable value.

    Setting a different value notifies every observer.
    """

    def __init__(self, value: Optional[float] = None):
        super().__init__()
        self._value = value

    def value(self) -> float:
        if self._value is None:
            raise ValueError("Invalid quote: no value set")
        return self._value

    def is_valid(self) -> bool:
        return self._value is not None

    def set_value(self, value: Optional[float]) -> float:
        """Set a new value and return the change from the previous one."""
        diff = (value or 0.0) - (self._value or 0.0)
        if value != self._value:
            self._value = value
            self.notify_observers()
        return diff

    def __repr__(self) -> str:
        return f"SimpleQuote({self._value})"


class LazyObject(Observable, Observer):
    """
    Calculate-on-demand object.

    Subclasses implement perform_calculations(); readers call calculate()
    before touching derived state.
    """

    def __init__(self):
        Observable.__init__(self)
        self._calculated = False
        self._frozen = False
        self._updating = False
        self.recalculation_count = 0

    @property
    def is_calculated(self) -> bool:
        return self._calculated

    def update(self) -> None:
        if self._updating:
            return
        self._updating = True
        try:
            self._calculated = False
            if not self._frozen:
                self.notify_observers()
        finally:
            self._updating = False

    def recalculate(self) -> None:
        """Force a recalculation regardless of the dirty flag."""
        self._calculated = False
        self.calculate()
        self.notify_observers()

    def freeze(self) -> None:
        """Stop forwarding notifications; reads keep the current results."""
        self._frozen = True

    def unfreeze(self) -> None:
        if self._frozen:
            self._frozen = False
            self.update()

    def calculate(self) -> None:
        if self._calculated or self._frozen and self.recalculation_count > 0:
            return
        # flag first so that re-entrant reads during the calculation do not recurse
        self._calculated = True
        try:
            self.perform_calculations()
        except Exception:
            self._calculated = False
            raise
        self.recalculation_count += 1
        logger.debug("%s recalculated (%d)", type(self).__name__, self.recalculation_count)

    def perform_calculations(self) -> None:
        raise NotImplementedError


__all__ = [
    "Observable",
    "Observer",
    "Quote",
    "SimpleQuote",
    "LazyObject",
]
