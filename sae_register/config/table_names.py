from enum import Enum


class TableNames(str, Enum):
    EVENT_GROUPS = "event_groups"
    INVITATION_LISTS = "invitation_lists"
    EXECUTIVES = "executives"
    GUESTS = "guests"
    EVENTS = "events"
    EVENT_LISTS = "event_lists"
    EVENT_GUESTS = "event_guests"
    SUBSTITUTIONS = "substitutions"
    EMAIL_LOGS = "email_logs"
