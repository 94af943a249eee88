"""Pure Pomodoro cycle rules: phase kind, duration, and display status."""

from __future__ import annotations

from .state import PomodoroSettings, PomodoroStatus


def total_phases(settings: PomodoroSettings) -> int:
    return 2 * settings.cycles


def is_study_phase(cycle_index: int) -> bool:
    return cycle_index % 2 == 0


def is_long_break(cycle_index: int, settings: PomodoroSettings) -> bool:
    """Return True when the phase at `cycle_index` is a long break.

    Breaks sit on odd indices; the n-th break (1-based) is long when n is a
    multiple of `settings.long_break_interval`.
    """
    if is_study_phase(cycle_index):
        return False
    break_number = (cycle_index + 1) // 2
    return break_number % settings.long_break_interval == 0


def phase_duration(cycle_index: int, settings: PomodoroSettings) -> int:
    if is_study_phase(cycle_index):
        return settings.study_seconds
    if is_long_break(cycle_index, settings):
        return settings.long_break_seconds
    return settings.short_break_seconds


def phase_sequence(settings: PomodoroSettings) -> list[int]:
    return [phase_duration(index, settings) for index in range(total_phases(settings))]


def pomodoro_status(cycle_index: int, settings: PomodoroSettings) -> PomodoroStatus:
    return PomodoroStatus(
        cycle=cycle_index // 2 + 1,
        total_cycles=settings.cycles,
        is_study=is_study_phase(cycle_index),
        is_long_break=is_long_break(cycle_index, settings),
    )
