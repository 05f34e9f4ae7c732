def build_retention_prompt(name: str, date_str: str, time_str: str) -> str:
    return (
        f"Write a friendly, persuasive message for {name} who wants to cancel their "
        f"appointment on {date_str} at {time_str}. The message should:\n"
        "  1. Acknowledge their desire to cancel\n"
        "  2. Highlight the benefits of keeping the appointment\n"
        "  3. Offer rescheduling as an alternative to cancellation\n"
        "  4. Use warm, conversational language\n"
        "  5. Be brief (under 150 words) but compelling\n"
        "  6. End with clear options for next steps (confirm cancellation or reschedule)"
    )


def build_farewell_prompt(name: str) -> str:
    return (
        f"Write a brief, friendly message confirming that {name}'s appointment has been "
        "cancelled. Express appreciation for their communication, note that they're welcome "
        "to schedule again in the future, and keep it under 100 words."
    )


def build_countdown_prompt(name: str, day_of_week: str, days_to_go: int) -> str:
    plural = "s" if days_to_go > 1 else ""
    return (
        f"Write a friendly WhatsApp reminder for {name} that their appointment is scheduled "
        f"on {day_of_week} which is {days_to_go} day{plural} from today. This is a daily "
        "countdown reminder. Keep it short, friendly and clear."
    )


def build_near_term_prompt(name: str, time_str: str, lead_hours: int) -> str:
    return (
        f"Write a friendly WhatsApp reminder for {name} that their appointment is scheduled "
        f"at {time_str} TODAY, just {lead_hours} hours from now. Keep it short and clear."
    )


def build_hook_prompt(recipient_name: str, new_name: str) -> str:
    return (
        f"Write a friendly WhatsApp message to {recipient_name} telling them that {new_name} "
        "has joined our team/service and asking what they're waiting for to book an "
        "appointment with us. Keep it engaging, under 100 words, and include a "
        "call-to-action to book an appointment."
    )
