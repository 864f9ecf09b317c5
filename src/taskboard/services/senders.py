"""Resolve who sent a chat message.

A message may arrive with the sender's profile joined in, or bare. Bare
messages sent by the local user can still be named from the local profile;
anything else is unknown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

UNKNOWN_SENDER_NAME = "Unknown User"
AVATAR_PALETTE_SIZE = 8


@dataclass(frozen=True, slots=True)
class SenderProfile:
    id: str | None = None
    email: str | None = None
    full_name: str | None = None

    @property
    def name(self) -> str | None:
        if self.full_name:
            return self.full_name
        if self.email:
            return self.email.split("@", 1)[0]
        return None


@dataclass(frozen=True, slots=True)
class ChatMessage:
    sender_id: str
    content: str
    sender: SenderProfile | None = None


@dataclass(frozen=True, slots=True)
class JoinedIdentity:
    profile: SenderProfile


@dataclass(frozen=True, slots=True)
class FallbackLocalIdentity:
    profile: SenderProfile


@dataclass(frozen=True, slots=True)
class UnknownIdentity:
    sender_id: str


SenderIdentity = Union[JoinedIdentity, FallbackLocalIdentity, UnknownIdentity]


def resolve_sender(message: ChatMessage, local_profile: SenderProfile | None = None) -> SenderIdentity:
    """Pick the best identity source for ``message``'s sender."""
    if message.sender is not None and message.sender.name:
        return JoinedIdentity(message.sender)
    if local_profile is not None and local_profile.id == message.sender_id:
        return FallbackLocalIdentity(local_profile)
    return UnknownIdentity(message.sender_id)


def display_name(identity: SenderIdentity) -> str:
    if isinstance(identity, (JoinedIdentity, FallbackLocalIdentity)):
        return identity.profile.name or UNKNOWN_SENDER_NAME
    return UNKNOWN_SENDER_NAME


def initial(identity: SenderIdentity) -> str:
    name = display_name(identity)
    return name[0].upper() if name else "?"


def avatar_color_index(sender_id: str, palette_size: int = AVATAR_PALETTE_SIZE) -> int:
    """Stable palette slot for a sender, from the sum of its code points."""
    if palette_size <= 0:
        raise ValueError("palette_size must be positive")
    return sum(ord(char) for char in sender_id) % palette_size


__all__ = [
    "ChatMessage",
    "FallbackLocalIdentity",
    "JoinedIdentity",
    "SenderIdentity",
    "SenderProfile",
    "UnknownIdentity",
    "avatar_color_index",
    "display_name",
    "initial",
    "resolve_sender",
]
