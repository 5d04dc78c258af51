"""USSD menu state machine.

Every screen is reachable from ``(step, service_context)`` plus the newest
keystroke alone. The table below is the whole menu tree: each live state maps
tokens to a rule, with a ``None`` row catching any other token. States that are
not in the table (a fresh session receiving non-empty text, step 2 without a
context) fall back to the main menu.
"""

from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from telehealth_ussd.domain.menus import UssdReply
from telehealth_ussd.domain.sessions import (
    AppointmentSummary,
    ServiceContext,
    UssdSession,
)

INPUT_SEPARATOR = "*"
SUPPORT_HOTLINE = "+232 44 444 419"


class Screen(Enum):
    """Every screen the menu can show."""

    MAIN_MENU = "main_menu"
    INVALID_MAIN_MENU = "invalid_main_menu"
    BOOKING_MENU = "booking_menu"
    BOOKING_CALL = "booking_call"
    HEALTH_TIPS_MENU = "health_tips_menu"
    INVALID_HEALTH_TIPS = "invalid_health_tips"
    MATERNAL_TIPS = "maternal_tips"
    NUTRITION_TIPS = "nutrition_tips"
    COMING_SOON = "coming_soon"
    EMERGENCY_CONTACTS = "emergency_contacts"
    APPOINTMENT_LIST = "appointment_list"
    INVALID_APPOINTMENT = "invalid_appointment"
    APPOINTMENT_DETAIL = "appointment_detail"
    REGISTRATION = "registration"
    GOODBYE = "goodbye"


@dataclass(frozen=True)
class Rule:
    """Target of a transition: screen to show and where the dialog goes next."""

    screen: Screen
    step: int = 1
    context: ServiceContext | None = None
    terminal: bool = False


@dataclass(frozen=True)
class MenuTransition:
    """Result of applying one request to a session."""

    session: UssdSession
    reply: UssdReply


_State = tuple[int, ServiceContext | None]

_MAIN = Rule(Screen.MAIN_MENU)


def _end(screen: Screen) -> Rule:
    return Rule(screen, terminal=True)


def _submenu(screen: Screen, context: ServiceContext) -> Rule:
    return Rule(screen, step=2, context=context)


TRANSITIONS: dict[_State, dict[str | None, Rule]] = {
    (1, None): {
        "1": _submenu(Screen.BOOKING_MENU, ServiceContext.APPOINTMENT),
        "2": _submenu(Screen.HEALTH_TIPS_MENU, ServiceContext.HEALTH_TIPS),
        "3": _end(Screen.EMERGENCY_CONTACTS),
        "4": _submenu(Screen.APPOINTMENT_LIST, ServiceContext.CHECK_APPOINTMENTS),
        "5": _end(Screen.REGISTRATION),
        "0": _end(Screen.GOODBYE),
        None: Rule(Screen.INVALID_MAIN_MENU),
    },
    (2, ServiceContext.HEALTH_TIPS): {
        "1": _end(Screen.MATERNAL_TIPS),
        "2": _end(Screen.NUTRITION_TIPS),
        "3": _end(Screen.COMING_SOON),
        "4": _end(Screen.COMING_SOON),
        "5": _end(Screen.COMING_SOON),
        "0": _MAIN,
        None: _submenu(Screen.INVALID_HEALTH_TIPS, ServiceContext.HEALTH_TIPS),
    },
    (2, ServiceContext.CHECK_APPOINTMENTS): {
        "0": _MAIN,
        None: _submenu(
            Screen.INVALID_APPOINTMENT, ServiceContext.CHECK_APPOINTMENTS
        ),
    },
    (2, ServiceContext.APPOINTMENT): {
        "0": _MAIN,
        None: _end(Screen.BOOKING_CALL),
    },
}

_APPOINTMENT_SCREENS = {
    Screen.APPOINTMENT_LIST,
    Screen.APPOINTMENT_DETAIL,
    Screen.INVALID_APPOINTMENT,
}


def last_token(text: str) -> str:
    """Return the newest keystroke from a ``*``-joined input sequence."""
    return text.split(INPUT_SEPARATOR)[-1].strip()


def resolve_rule(
    session: UssdSession, token: str, appointment_count: int = 0
) -> Rule:
    """Look up the rule for the session's state and the newest token."""
    state: _State = (session.step, session.service_context)
    rules = TRANSITIONS.get(state)
    if rules is None:
        return _MAIN
    if state == (2, ServiceContext.CHECK_APPOINTMENTS) and _is_listed(
        token, appointment_count
    ):
        return _end(Screen.APPOINTMENT_DETAIL)
    return rules.get(token, rules[None])


def needs_appointments(session: UssdSession, text: str) -> bool:
    """Return true when handling ``text`` renders an appointment screen."""
    if text == "":
        return False
    if (session.step, session.service_context) == (
        2,
        ServiceContext.CHECK_APPOINTMENTS,
    ):
        return True
    return resolve_rule(session, last_token(text)).screen in _APPOINTMENT_SCREENS


def advance(
    session: UssdSession,
    text: str,
    appointments: Sequence[AppointmentSummary] = (),
) -> MenuTransition:
    """Apply one request to a session and return the next state and reply."""
    if text == "":
        token = ""
        rule = _MAIN
    else:
        token = last_token(text)
        rule = resolve_rule(session, token, len(appointments))

    history = session.history
    if text not in history:
        history = (*history, text)

    next_session = replace(
        session,
        step=rule.step,
        service_context=rule.context,
        history=history,
    )
    reply = UssdReply(
        text=render_screen(rule.screen, token, appointments),
        terminal=rule.terminal,
    )
    return MenuTransition(session=next_session, reply=reply)


def render_screen(
    screen: Screen, token: str, appointments: Sequence[AppointmentSummary]
) -> str:
    """Return the handset text for a screen."""
    if screen is Screen.APPOINTMENT_LIST:
        return _appointment_list(appointments)
    if screen is Screen.INVALID_APPOINTMENT:
        return f"{_INVALID}\n\n{_appointment_hint(len(appointments))}"
    if screen is Screen.APPOINTMENT_DETAIL:
        return _appointment_detail(appointments[int(token) - 1])
    return _STATIC_SCREENS[screen]


def _is_listed(token: str, count: int) -> bool:
    return token in {str(position) for position in range(1, count + 1)}


_INVALID = "Invalid option. Please try again."

_MAIN_OPTIONS = (
    "1. Book Appointment\n"
    "2. Health Tips\n"
    "3. Emergency Contact\n"
    "4. Check Appointments\n"
    "5. Register New User\n"
    "\n"
    "0. Exit"
)

_TIPS_OPTIONS = (
    "1. Maternal Health\n"
    "2. Nutrition\n"
    "3. Mental Wellness\n"
    "4. Preventive Care\n"
    "5. Emergency Signs\n"
    "\n"
    "0. Back to Main Menu"
)

_STATIC_SCREENS: dict[Screen, str] = {
    Screen.MAIN_MENU: f"Welcome to TeleHealth Platform\n\n{_MAIN_OPTIONS}",
    Screen.INVALID_MAIN_MENU: f"{_INVALID}\n\n{_MAIN_OPTIONS}",
    Screen.BOOKING_MENU: (
        "Book Appointment\n\n"
        "Select Doctor Specialization:\n\n"
        "1. General Medicine\n"
        "2. Gynecology\n"
        "3. Obstetrics\n"
        "4. Pediatrics\n"
        "5. Family Medicine\n"
        "\n"
        "0. Back to Main Menu"
    ),
    Screen.BOOKING_CALL: (
        f"Booking appointment...\nPlease call {SUPPORT_HOTLINE}\nto complete booking."
    ),
    Screen.HEALTH_TIPS_MENU: f"Daily Health Tips\n\n{_TIPS_OPTIONS}",
    Screen.INVALID_HEALTH_TIPS: f"{_INVALID}\n\n{_TIPS_OPTIONS}",
    Screen.MATERNAL_TIPS: (
        "Maternal Health Tips\n\n"
        "• Take prenatal vitamins daily\n"
        "• Attend all prenatal checkups\n"
        "• Eat nutritious foods\n"
        "• Stay hydrated\n"
        "• Get adequate rest\n"
        "• Avoid alcohol & smoking\n\n"
        f"For more info, call:\n{SUPPORT_HOTLINE}"
    ),
    Screen.NUTRITION_TIPS: (
        "Nutrition Guidelines\n\n"
        "• Eat 5 servings of fruits/vegetables daily\n"
        "• Choose whole grains\n"
        "• Include lean proteins\n"
        "• Limit processed foods\n"
        "• Drink 8 glasses of water\n"
        "• Take iron supplements if needed"
    ),
    Screen.COMING_SOON: (
        f"Content coming soon. Call {SUPPORT_HOTLINE} for more info."
    ),
    Screen.EMERGENCY_CONTACTS: (
        "Emergency Contacts\n\n"
        f"24/7 Emergency Hotline:\n{SUPPORT_HOTLINE}\n\n"
        "Local Emergency:\n911\n\n"
        "Women's Health Crisis:\n+1-800-WOMEN"
    ),
    Screen.REGISTRATION: (
        "New User Registration\n\n"
        "To complete registration, please:\n"
        "1. Visit our website\n"
        f"2. Call {SUPPORT_HOTLINE}\n"
        "3. Visit nearest clinic\n\n"
        "Registration requires:\n"
        "- Full Name\n"
        "- Phone Number\n"
        "- Location\n"
        "- Emergency Contact"
    ),
    Screen.GOODBYE: "Thank you for using TeleHealth USSD. Goodbye!",
}

_CONSULTATION_LABELS = {
    "video": "Video Consultation",
    "voice": "Voice Call",
    "chat": "Chat",
    "in-person": "In-Person Visit",
}


def _clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {meridiem}"


def _appointment_hint(count: int) -> str:
    if count == 0:
        return "0. Back to Main Menu"
    if count == 1:
        choices = "1"
    elif count == 2:
        choices = "1 or 2"
    else:
        choices = f"1-{count}"
    return f"Press {choices} for details\n0. Back to Main Menu"


def _appointment_list(appointments: Sequence[AppointmentSummary]) -> str:
    if not appointments:
        return (
            "Your Appointments\n\nNo upcoming appointments\n\n0. Back to Main Menu"
        )
    lines = ["Your Appointments", "", "Upcoming:"]
    for position, appointment in enumerate(appointments, start=1):
        starts_at = appointment.starts_at
        lines.append(
            f"{position}. {appointment.doctor_name} - "
            f"{starts_at:%b} {starts_at.day}, {_clock(starts_at)}"
        )
    lines.extend(
        ["", "No other appointments", "", _appointment_hint(len(appointments))]
    )
    return "\n".join(lines)


def _appointment_detail(appointment: AppointmentSummary) -> str:
    starts_at = appointment.starts_at
    consultation = _CONSULTATION_LABELS.get(
        appointment.consultation_type, appointment.consultation_type.title()
    )
    return (
        f"{appointment.doctor_name} - {appointment.specialization}\n\n"
        f"Date: {starts_at:%B} {starts_at.day}, {starts_at.year}\n"
        f"Time: {_clock(starts_at)} - {_clock(appointment.ends_at)}\n"
        f"Type: {consultation}\n"
        f"Status: {appointment.status.title()}\n\n"
        f"To reschedule, call:\n{SUPPORT_HOTLINE}"
    )
