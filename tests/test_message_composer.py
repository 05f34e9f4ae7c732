from __future__ import annotations

from datetime import date

from conftest import TZ, StubGenerator, at
from reminderbot.application.use_cases.message_composer import CANCEL_CHOICE_FOOTER, MessageComposer
from reminderbot.domain.entities.appointment import Appointment

ANN = Appointment("Ann", "111", at(2024, 3, 4, 14))


def test_retention_falls_back_to_template_when_generation_fails():
    generator = StubGenerator(fail=True)
    text = MessageComposer(TZ, generator=generator).retention(ANN)

    assert text.startswith("✨ *Hi Ann!* ✨")
    assert "*Monday, March 4* at *2:00 PM*" in text
    assert text.endswith(CANCEL_CHOICE_FOOTER)
    assert len(generator.prompts) == 1


def test_retention_uses_generated_body():
    text = MessageComposer(TZ, generator=StubGenerator(text="Please stay, Ann!")).retention(ANN)

    assert text == "Please stay, Ann!" + CANCEL_CHOICE_FOOTER


def test_templated_messages_do_not_call_generator():
    generator = StubGenerator()
    composer = MessageComposer(TZ, generator=generator)

    composer.date_options(ANN, [date(2024, 3, 5)])
    composer.time_options(date(2024, 3, 5), [at(2024, 3, 5, 10)])
    composer.rescheduled(ANN.appointment_time, at(2024, 3, 5, 10))

    assert generator.prompts == []


def test_date_and_time_options_layout():
    composer = MessageComposer(TZ)

    dates_text = composer.date_options(ANN, [date(2024, 3, 5), date(2024, 3, 6)])
    slots_text = composer.time_options(date(2024, 3, 5), [at(2024, 3, 5, 10), at(2024, 3, 5, 13)])

    assert "Monday, March 4, 2024 at 2:00 PM" in dates_text
    assert "1. Tuesday, March 5, 2024\n2. Wednesday, March 6, 2024" in dates_text
    assert "10:00 AM, 1:00 PM" in slots_text
