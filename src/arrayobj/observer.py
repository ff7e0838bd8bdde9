from typing import Protocol, runtime_checkable


@runtime_checkable
class Observer(Protocol):
    def update(self, subject: 'Subject') -> None:
        """Called by each subject this observer is attached to when it notifies."""
        ...


@runtime_checkable
class Subject(Protocol):
    def attach(self, observer: Observer) -> None: ...
    def detach(self, observer: Observer) -> None: ...
    def notify(self) -> None:
        """Call ``update`` on every attached observer. The order is up to the implementation."""
        ...
