from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import load_settings

from src.tutoring_center.tutoring_center.container import build_container

DEMO_TEACHERS = [
    {"name": "Aziza Karimova", "subject": "English", "phone": "+998901112233", "salaryType": "Fixed"},
    {"name": "Jasur Aliyev", "subject": "Math", "phone": "+998907778899", "salaryType": "Percent"},
]


def main() -> None:
    settings = load_settings()
    container = build_container(settings)
    try:
        teacher_ids = [container.teacher_service.add_teacher(t) for t in DEMO_TEACHERS]
        english = container.course_service.add_course(
            {
                "title": "English-A1",
                "instructor": DEMO_TEACHERS[0]["name"],
                "instructorId": teacher_ids[0],
                "price": "300 000",
                "days": "DCHJ",
                "time": "14:00 - 15:30",
                "status": "Live",
            }
        )
        container.course_service.add_course(
            {
                "title": "Math-Pro",
                "instructor": DEMO_TEACHERS[1]["name"],
                "instructorId": teacher_ids[1],
                "price": 450000,
                "days": "SPSH",
                "time": "16:00",
                "status": "Live",
            }
        )
        for name in ("Dilnoza", "Bekzod", "Madina"):
            container.student_service.add_student({"name": name, "assignedCourseId": english})
        container.lead_service.add_lead({"name": "Sardor", "phone": "+998933334455", "source": "Instagram"})
    finally:
        container.close()

    print(f"OK: Seeded demo data ({type(container.store).__name__})")


if __name__ == "__main__":
    main()
