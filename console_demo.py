"""
Offline console demo: walks through availability and booking without a server.

Uses the real slot generator, conflict filter, booking service and
lifecycle against an in-memory store and a demo catalog. No HTTP, no
database. Designed for live demo walkthroughs.

Usage:
    python console_demo.py
    python console_demo.py --scenario booking
    python console_demo.py --scenario conflict
    python console_demo.py --scenario lunch
"""

import argparse
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from slotbook.config import settings
from slotbook.engine.weekly_availability import WeeklyAvailability
from slotbook.schemas.appointment_schema import Actor, ActorRole
from slotbook.services.availability_service import AvailabilityService
from slotbook.services.booking_service import BookingService
from slotbook.services.catalog import Service, ServiceCatalog
from slotbook.services.events import BookingEvent, EventBus
from slotbook.store.memory import InMemoryAppointmentStore

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_SERVICE_ID = "haircut"
ADMIN = Actor(ActorRole.ADMIN, "owner")


def next_weekday(start: date, weekday: int) -> date:
    """First date strictly after ``start`` falling on ``weekday`` (Monday=0)."""
    days_ahead = (weekday - start.weekday()) % 7 or 7
    return start + timedelta(days=days_ahead)


def build_demo_catalog() -> ServiceCatalog:
    return ServiceCatalog([
        Service(
            id=DEMO_SERVICE_ID,
            title="Modern Haircut",
            availability=WeeklyAvailability.from_dict({
                "monday": [{"start": "09:00", "end": "12:00"}, {"start": "13:00", "end": "15:00"}],
                "wednesday": [{"start": "10:00", "end": "18:00"}],
                "friday": [{"start": "09:00", "end": "12:00"}],
            }),
        ),
    ])


class ConsoleSession:
    """Drives the booking engine from the terminal."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock
        self.catalog = build_demo_catalog()
        self.store = InMemoryAppointmentStore()
        self.events = EventBus()
        self.events.subscribe(self._on_event)
        self.availability = AvailabilityService(self.catalog, self.store, clock=clock)
        self.booking = BookingService(self.catalog, self.store, events=self.events, clock=clock)
        self.monday = next_weekday(clock().date(), 0)

    def say(self, text: str) -> None:
        print(f"{GREEN}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _on_event(self, event: BookingEvent) -> None:
        self.system_log(f"event: {event.type.value} {event.appointment.id}")

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def show_slots(self, day: date) -> list[str]:
        slots = self.availability.slots_for(DEMO_SERVICE_ID, day)
        if not slots:
            self.say(f"No slots on {day:%A %Y-%m-%d}.")
            return []
        rendered = [
            f"{s.time_label}" if s.available else f"{DIM}{s.time_label} (booked){RESET}{GREEN}"
            for s in slots
        ]
        self.say(f"{day:%A %Y-%m-%d}: " + ", ".join(rendered))
        return [s.time_label for s in slots if s.available]

    def book(self, when: datetime, customer_id: str) -> Optional[str]:
        result = self.booking.book(DEMO_SERVICE_ID, when, customer_id)
        if result.success:
            self.say(f"Booked {result.appointment.id} for {customer_id} at {when:%Y-%m-%d %H:%M}.")
            return result.appointment.id
        print(f"{RED}Rejected ({result.error.code}): {result.error.message}{RESET}")
        return None

    def cancel(self, appointment_id: str, actor: Actor) -> None:
        result = self.booking.cancel(appointment_id, actor)
        if result.success:
            self.say(f"Canceled {appointment_id}.")
        else:
            print(f"{RED}Rejected ({result.error.code}): {result.error.message}{RESET}")

    # ------------------------------------------------------------------ #
    # Scripted scenarios
    # ------------------------------------------------------------------ #

    def _scenario_booking(self) -> None:
        at_ten = datetime.combine(self.monday, datetime.min.time()).replace(hour=10)
        self.show_slots(self.monday)
        appointment_id = self.book(at_ten, "cust-a")
        self.show_slots(self.monday)
        self.book(at_ten - timedelta(days=14), "cust-a")
        if appointment_id:
            self.cancel(appointment_id, Actor(ActorRole.CUSTOMER, "cust-a"))
        self.show_slots(self.monday)

    def _scenario_conflict(self) -> None:
        at_ten = datetime.combine(self.monday, datetime.min.time()).replace(hour=10)
        customers = ["cust-a", "cust-b", "cust-c", "cust-d"]
        with ThreadPoolExecutor(max_workers=len(customers)) as pool:
            results = list(pool.map(
                lambda c: (c, self.booking.book(DEMO_SERVICE_ID, at_ten, c)), customers
            ))
        for customer_id, result in results:
            outcome = result.appointment.id if result.success else result.error.code
            self.system_log(f"{customer_id}: {outcome}")
        winners = [c for c, r in results if r.success]
        self.say(f"{len(winners)} of {len(customers)} concurrent attempts succeeded.")

    def _scenario_lunch(self) -> None:
        self.show_slots(self.monday)
        self.system_log("12:00-13:00 is closed; no slot bridges the gap.")

    SCENARIOS = {
        "booking": _scenario_booking,
        "conflict": _scenario_conflict,
        "lunch": _scenario_lunch,
    }

    def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        step = self.SCENARIOS.get(scenario)
        if step is None:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SLOTBOOK - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Granularity: {settings.scheduling.slot_granularity_minutes} min{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        step(self)
        print(f"{BOLD}{'=' * 60}{RESET}")

    # ------------------------------------------------------------------ #
    # Interactive loop
    # ------------------------------------------------------------------ #

    HELP = (
        "Commands: slots YYYY-MM-DD | book YYYY-MM-DD HH:MM CUSTOMER | "
        "cancel APPOINTMENT_ID [CUSTOMER] | complete APPOINTMENT_ID | quit"
    )

    def handle(self, line: str) -> bool:
        """Execute one command line. Returns False when the session should end."""
        parts = line.split()
        if not parts:
            return True
        command, args = parts[0].lower(), parts[1:]
        try:
            if command in ("quit", "exit", "q"):
                return False
            if command == "slots" and len(args) == 1:
                self.show_slots(date.fromisoformat(args[0]))
            elif command == "book" and len(args) == 3:
                self.book(datetime.fromisoformat(f"{args[0]}T{args[1]}"), args[2])
            elif command == "cancel" and args:
                actor = Actor(ActorRole.CUSTOMER, args[1]) if len(args) > 1 else ADMIN
                self.cancel(args[0], actor)
            elif command == "complete" and len(args) == 1:
                result = self.booking.complete(args[0], ADMIN)
                if result.success:
                    self.say(f"Completed {args[0]}.")
                else:
                    print(f"{RED}Rejected ({result.error.code}): {result.error.message}{RESET}")
            else:
                self.say(self.HELP)
        except ValueError as exc:
            print(f"{RED}Could not parse input: {exc}{RESET}")
        return True

    def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SLOTBOOK - Console Demo{RESET}")
        print(f"{BOLD}  Service: {DEMO_SERVICE_ID}  (next Monday {self.monday}){RESET}")
        print(f"{BOLD}  Type 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        self.say(self.HELP)
        while self.handle(input(f"\n{BLUE}> {RESET}").strip()):
            pass
        print(f"\n{DIM}Session ended.{RESET}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        session.run_scenario(args.scenario)
    else:
        session.run()


if __name__ == "__main__":
    main()
