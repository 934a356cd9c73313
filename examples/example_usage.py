"""Example: drive the engine through the service layer (no Flask).

Controllers are a thin adapter; the attendance rules live in the services.
"""

import importlib
from datetime import datetime

from config import get_settings_module

from timeclock.container import build_container
from timeclock.core.enums import Role
from timeclock.core.session import SessionContext


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    me = SessionContext(actor_id=1, role=Role.EMPLOYEE)
    svc = container.attendance_service
    svc.clock_in(me, 1, timestamp=datetime(2025, 3, 10, 9, 10))
    record = svc.clock_out(me, 1, timestamp=datetime(2025, 3, 10, 16, 45), early_exit_justification="medical appointment")
    print(record.to_dict())

    report = container.hours_service.build_report(me, reference_date=record.work_date, employee_ids=[1])
    print(report.to_dict())


if __name__ == "__main__":
    main()
