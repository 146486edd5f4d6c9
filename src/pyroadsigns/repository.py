"""In-memory road sign collection.

This is the only component allowed to add or drop observations. Every
mutation is written through to the store (while a session is active) and
then announced to subscribers, which is how the marker layer stays in step.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator

from pyroadsigns.exceptions import DuplicateObservationError
from pyroadsigns.models.observation import RoadSignObservation
from pyroadsigns.storage.store import PersistentStore

_logger = logging.getLogger(__name__)

Listener = Callable[[tuple[RoadSignObservation, ...]], None]


def _always_persist() -> bool:
    return True


class SignRepository:
    """Ordered, id-unique collection of observations.

    Parameters
    ----------
    store : PersistentStore
        Durable storage for the sign bucket.
    should_persist : callable
        Returns whether writes should reach the store right now. The
        application passes the session's ``is_active`` so nothing is
        written for a logged-out operator.
    """

    def __init__(
        self,
        store: PersistentStore,
        *,
        should_persist: Callable[[], bool] = _always_persist,
    ) -> None:
        self._store = store
        self._should_persist = should_persist
        self._observations: list[RoadSignObservation] = []
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def observations(self) -> tuple[RoadSignObservation, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._observations)

    def get(self, observation_id: str) -> RoadSignObservation | None:
        for observation in self._observations:
            if observation.id == observation_id:
                return observation
        return None

    def ids(self) -> set[str]:
        return {observation.id for observation in self._observations}

    def __len__(self) -> int:
        return len(self._observations)

    def __iter__(self) -> Iterator[RoadSignObservation]:
        return iter(tuple(self._observations))

    def __contains__(self, observation_id: object) -> bool:
        return any(observation.id == observation_id for observation in self._observations)

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with a snapshot after every change.

        Returns a callable that removes the subscription.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        snapshot = self.observations
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.exception("Road sign listener %r failed", listener)

    def _commit(self, observations: list[RoadSignObservation]) -> None:
        """Persist *observations*, then adopt them and notify.

        A failed write raises before anything in memory changes, so the
        collection and the marker layer stay as they were.
        """
        if self._should_persist():
            self._store.save_observations(observations)
        else:
            _logger.debug("Session inactive; not persisting %d road sign(s)", len(observations))
        self._observations = observations
        self._notify()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append(self, observation: RoadSignObservation) -> None:
        if observation.id in self:
            raise DuplicateObservationError(observation.id)
        self._commit([*self._observations, observation])
        _logger.debug(
            "Appended road sign id=%s category=%s (%d total)",
            observation.id,
            observation.category,
            len(self._observations),
        )

    def remove(self, observation_id: str) -> RoadSignObservation | None:
        """Drop the observation with *observation_id*.

        Returns the removed observation, or ``None`` (and changes nothing)
        when the id is absent.
        """
        removed = self.get(observation_id)
        if removed is None:
            _logger.debug("Remove ignored, unknown road sign id=%s", observation_id)
            return None

        # An empty list is written too; otherwise the last removed sign would reload.
        self._commit([o for o in self._observations if o.id != observation_id])
        _logger.debug("Removed road sign id=%s (%d left)", observation_id, len(self._observations))
        return removed

    def clear(self) -> None:
        """Empty the collection without touching the store.

        Logout purges the bucket itself; saving an empty list here would be
        redundant.
        """
        self._observations = []
        self._notify()

    def load_initial(self) -> int:
        """Replace the contents with what the store holds. Returns the count."""
        self._observations = list(self._store.load_observations())
        _logger.debug("Loaded %d road sign(s) from storage", len(self._observations))
        self._notify()
        return len(self._observations)
