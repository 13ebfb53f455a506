from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from cachetools import LRUCache

from app.models.schemas import FailureOut, SearchSnapshot
from app.models.state import FailedState, SuccessState
from app.services.presenters import RecordingMapPresenter, RecordingResultView
from app.services.search_orchestrator import Geocoder, Router, SearchOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class MapSession:
    session_id: str
    orchestrator: SearchOrchestrator
    presenter: RecordingMapPresenter
    view: RecordingResultView

    def snapshot(self) -> SearchSnapshot:
        state = self.orchestrator.state
        snap = SearchSnapshot(
            sessionId=self.session_id,
            state=state.status,
            busy=self.view.busy,
            buttonLabel=self.view.button_label,
            error=self.view.error,
            result=self.view.result_out(),
            overlays=self.presenter.overlays_out(),
            viewport=self.presenter.viewport_out(),
        )
        if isinstance(state, FailedState):
            snap.failure = FailureOut(
                reason=state.reason.value,
                side=state.side.value if state.side else None,
                message=state.message,
            )
        elif isinstance(state, SuccessState):
            snap.startPlace = state.startPlace.displayName
            snap.destinationPlace = state.destinationPlace.displayName
        return snap


class SessionStore:
    """One orchestrator per browser session, kept in process memory.

    At most `max_sessions` are held; the least recently used one is dropped
    to make room. A search still running in a dropped session finishes
    against its own orphaned orchestrator.
    """

    def __init__(
        self,
        geocoder: Geocoder,
        router: Router,
        fit_padding_px: int = 50,
        max_sessions: int = 1000,
    ) -> None:
        self._geocoder = geocoder
        self._router = router
        self.fit_padding_px = fit_padding_px
        self._sessions: LRUCache = LRUCache(maxsize=max_sessions)

    def get(self, session_id: str) -> Optional[MapSession]:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str) -> MapSession:
        session = self._sessions.get(session_id)
        if session is None:
            presenter = RecordingMapPresenter()
            view = RecordingResultView()
            orchestrator = SearchOrchestrator(
                self._geocoder,
                self._router,
                presenter,
                view,
                fit_padding_px=self.fit_padding_px,
            )
            session = MapSession(session_id, orchestrator, presenter, view)
            if len(self._sessions) >= self._sessions.maxsize:
                logger.info("Session limit %d reached, dropping least recently used", self._sessions.maxsize)
            self._sessions[session_id] = session
            logger.info("Created map session %s", session_id)
        return session

    def reset(self, session_id: str) -> Optional[MapSession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        session.orchestrator.reset()
        session.view.reset()
        return session

    def __len__(self) -> int:
        return len(self._sessions)
