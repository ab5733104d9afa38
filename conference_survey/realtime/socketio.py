"""Global Socket.IO server for admin dashboards and attendee clients.

Frontend convention:
- Socket.IO path: /socket.io/
- Auth: `query.token` or `auth.token` (JWT access token), optional on connect
- Clients call `join_conference` to receive broadcasts for one conference.

Every broadcast goes to the room ``conference_<id>``. Server code publishes
through the helpers in ``conference_survey.realtime.events``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.conf import settings
from rest_framework.exceptions import APIException
from rest_framework_simplejwt.exceptions import TokenError

from conference_survey.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


def _client_manager():
    url = getattr(settings, "SOCKETIO_MESSAGE_QUEUE", "")
    if not url:
        return None
    return socketio.AsyncRedisManager(url)


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=getattr(settings, "CORS_ALLOWED_ORIGINS", "*"),
    client_manager=_client_manager(),
    logger=False,
    engineio_logger=False,
)


@dataclass(frozen=True)
class RealtimeIdentity:
    kind: str
    admin_id: int | None = None
    attendee_id: str | None = None
    conference_id: str | None = None

    def as_session(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "admin_id": self.admin_id,
            "attendee_id": self.attendee_id,
            "conference_id": self.conference_id,
        }

    @classmethod
    def from_session(cls, session: Any) -> RealtimeIdentity | None:
        if not isinstance(session, dict) or "kind" not in session:
            return None
        return cls(
            kind=session["kind"],
            admin_id=session.get("admin_id"),
            attendee_id=session.get("attendee_id"),
            conference_id=session.get("conference_id"),
        )


def room_for_conference(conference_id: Any) -> str:
    return f"conference_{conference_id}"


def _identity_for_token(token: str) -> RealtimeIdentity:
    from conference_survey.attendees.authentication import (  # noqa: PLC0415
        ConferenceJWTAuthentication,
    )
    from conference_survey.attendees.models import Attendee  # noqa: PLC0415

    jwt_auth = ConferenceJWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    principal = jwt_auth.get_user(validated)
    if isinstance(principal, Attendee):
        return RealtimeIdentity(
            kind="attendee",
            attendee_id=str(principal.id),
            conference_id=str(principal.conference_id),
        )
    return RealtimeIdentity(kind="admin", admin_id=int(principal.id))


def _allowed_conference(identity: RealtimeIdentity, conference_id: Any):
    from conference_survey.conferences.models import Conference  # noqa: PLC0415

    pk = parse_uuid(conference_id)
    if pk is None:
        return None
    conference = Conference.objects.filter(pk=pk).first()
    if conference is None:
        return None
    if identity.kind == "admin" and conference.admin_id == identity.admin_id:
        return conference
    if identity.kind == "attendee" and str(conference.pk) == identity.conference_id:
        return conference
    return None


@database_sync_to_async
def _resolve_identity(token: str) -> RealtimeIdentity:
    return _identity_for_token(token)


@database_sync_to_async
def _join_target(identity: RealtimeIdentity, conference_id: Any):
    conference = _allowed_conference(identity, conference_id)
    if conference is None:
        return None
    return {"conference_id": str(conference.pk), "conference_name": conference.name}


@database_sync_to_async
def _live_counts(identity: RealtimeIdentity, survey_id: Any):
    from conference_survey.statistics.services import (  # noqa: PLC0415
        question_response_counts,
    )
    from conference_survey.surveys.models import Survey  # noqa: PLC0415

    pk = parse_uuid(survey_id)
    survey = Survey.objects.filter(pk=pk).first() if pk else None
    if survey is None or _allowed_conference(identity, survey.conference_id) is None:
        return None
    return question_response_counts(survey)


def _extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract JWT token from Socket.IO environ/auth.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token

    return None


async def _authenticate(token: str) -> RealtimeIdentity:
    try:
        return await _resolve_identity(token)
    except TokenError as exc:
        msg = "jwt_expired" if "expired" in str(exc).lower() else "unauthorized"
        raise ConnectionRefusedError(msg) from exc
    except APIException as exc:  # unknown admin/attendee, locked account
        msg = "unauthorized"
        raise ConnectionRefusedError(msg) from exc


async def _identity_for(sid: str, data: Any) -> RealtimeIdentity | None:
    token = data.get("token") if isinstance(data, dict) else None
    if isinstance(token, str) and token:
        try:
            identity = await _authenticate(token)
        except ConnectionRefusedError:
            return None
        await sio.save_session(sid, identity.as_session())
        return identity
    return RealtimeIdentity.from_session(await sio.get_session(sid))


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    token = _extract_token(environ, auth)
    if not token:
        await sio.save_session(sid, {})
        return

    try:
        identity = await _authenticate(token)
    except ConnectionRefusedError:
        raise
    except Exception as exc:
        logger.exception("Socket.IO connect error")
        msg = "server_error"
        raise ConnectionRefusedError(msg) from exc

    await sio.save_session(sid, identity.as_session())


@sio.event
async def disconnect(sid: str, *args):
    logger.debug("Socket disconnected: %s", sid)


@sio.event
async def join_conference(sid: str, data: Any):
    conference_id = data.get("conference_id") if isinstance(data, dict) else data
    identity = await _identity_for(sid, data)
    if identity is None:
        await sio.emit("error", {"message": "Authentication required"}, to=sid)
        return

    target = await _join_target(identity, conference_id)
    if target is None:
        await sio.emit(
            "error",
            {"message": "Conference not found or access denied"},
            to=sid,
        )
        return

    await sio.enter_room(sid, room_for_conference(target["conference_id"]))
    logger.info(
        "Socket %s (%s) joined conference %s",
        sid,
        identity.kind,
        target["conference_id"],
    )
    await sio.emit("joined_conference", target, to=sid)


@sio.event
async def leave_conference(sid: str, data: Any):
    conference_id = data.get("conference_id") if isinstance(data, dict) else data
    if parse_uuid(conference_id) is None:
        return
    await sio.leave_room(sid, room_for_conference(conference_id))
    logger.info("Socket %s left conference %s", sid, conference_id)


@sio.event
async def request_stats(sid: str, data: Any):
    survey_id = data.get("survey_id") if isinstance(data, dict) else data
    identity = await _identity_for(sid, data)
    if identity is None:
        await sio.emit("error", {"message": "Authentication required"}, to=sid)
        return

    stats = await _live_counts(identity, survey_id)
    if stats is None:
        await sio.emit("error", {"message": "Survey not found"}, to=sid)
        return
    await sio.emit("stats_data", {"survey_id": str(survey_id), "stats": stats}, to=sid)


@sio.event
async def ping(sid: str, data: Any = None):
    await sio.emit("pong", to=sid)


def emit_event_to_room(room: str, event: str, payload: dict[str, Any]) -> None:
    """Emit an event to a room from sync Django code.

    Runs inside ``on_commit`` callbacks, so a socket failure is logged and
    never turned into a failed request.
    """

    try:
        async_to_sync(sio.emit)(event, payload, room=room)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to emit %s to %s", event, room)


def emit_event_to_conference(
    conference_id: Any,
    event: str,
    payload: dict[str, Any],
) -> None:
    emit_event_to_room(room_for_conference(conference_id), event, payload)
