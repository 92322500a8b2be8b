from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sae_register.config.table_names import TableNames
from sae_register.invitations.dtos import EventModality, GuestType
from sae_register.models.base import Base, BaseModel, TimeStamp


class EventGroup(Base, TimeStamp):
    __tablename__ = TableNames.EVENT_GROUPS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # the group shown when the entry link carries no group id
    is_current: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<EventGroup {self.name}>"


class InvitationList(Base, TimeStamp):
    __tablename__ = TableNames.INVITATION_LISTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_group_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENT_GROUPS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    guests: Mapped[list["Guest"]] = relationship("Guest", back_populates="invitation_list")

    def __repr__(self) -> str:
        return f"<InvitationList {self.name}>"


class Executive(Base, TimeStamp):
    __tablename__ = TableNames.EXECUTIVES.value

    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    salutation: Mapped[str | None] = mapped_column(String(50), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Executive {self.first_name} {self.last_name}>"


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value

    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Sponsored guests are shown and greeted as their executive
    is_sponsored: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    executive_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.EXECUTIVES.value}.uuid", ondelete="SET NULL"),
        nullable=True,
    )
    executive: Mapped["Executive | None"] = relationship("Executive")

    list_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.INVITATION_LISTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    invitation_list: Mapped["InvitationList"] = relationship(
        "InvitationList", back_populates="guests"
    )

    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    guest_type: Mapped[str] = mapped_column(
        Enum(GuestType, name="guest_type_enum", values_callable=lambda x: [e.value for e in x]),
        default=GuestType.INVITADO,
        nullable=False,
    )
    salutation: Mapped[str | None] = mapped_column(String(50), nullable=True)
    nickname: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # Alternate address the guest prefers for joining webinars
    zoom_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Guest {self.email} - {self.guest_type}>"


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    modality: Mapped[str] = mapped_column(
        Enum(
            EventModality,
            name="event_modality_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)
    html_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    zoom_webinar_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    register_open: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Event {self.name} on {self.scheduled_at}>"


class EventList(TimeStamp):
    __tablename__ = TableNames.EVENT_LISTS.value

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        primary_key=True,
    )
    list_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.INVITATION_LISTS.value}.uuid", ondelete="CASCADE"),
        primary_key=True,
    )


class EventGuest(TimeStamp):
    """Registration of one guest for one event. At most one row per pair."""

    __tablename__ = TableNames.EVENT_GUESTS.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        primary_key=True,
    )
    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        primary_key=True,
    )
    registered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    zoom_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<EventGuest guest={self.guest_id} event={self.event_id} registered={self.registered}>"


class Substitution(Base, TimeStamp):
    __tablename__ = TableNames.SUBSTITUTIONS.value
    __table_args__ = (
        UniqueConstraint("event_group_id", "original_email", name="uq_substitution_original"),
    )

    event_group_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENT_GROUPS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    original_email: Mapped[str] = mapped_column(String(255), nullable=False)
    new_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Substitution {self.original_email} -> {self.new_email}>"


class EmailLog(Base, TimeStamp):
    __tablename__ = TableNames.EMAIL_LOGS.value

    provider_message_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    to_address: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    from_address: Mapped[str] = mapped_column(String(255), nullable=False)
    template_id: Mapped[str] = mapped_column(String(255), nullable=False)
    email_type: Mapped[str] = mapped_column(
        Enum("confirmation", name="email_type_enum"),
        nullable=False,
        index=True,
    )

    guest_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    event_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        Enum("pending", "sent", "failed", name="email_status_enum"),
        default="pending",
        nullable=False,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<EmailLog {self.provider_message_id} to={self.to_address} status={self.status}>"


__all__ = [
    "BaseModel",
    "EmailLog",
    "Event",
    "EventGroup",
    "EventGuest",
    "EventList",
    "Executive",
    "Guest",
    "InvitationList",
    "Substitution",
]
