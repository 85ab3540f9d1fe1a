"""Demo data for local development.

Learn: seed() is idempotent on users and organizations — existing rows
(matched by email / slug) are left alone, and an organization's projects
and tasks are only created together with the organization itself, so
running the seed twice changes nothing.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog
from sqlalchemy import select

from taskflow.auth.password import hash_password
from taskflow.db.engine import Database
from taskflow.db.models import (
    Organization,
    OrganizationMember,
    Project,
    ProjectStatus,
    Role,
    Task,
    TaskPriority,
    TaskStatus,
    User,
)

logger = structlog.get_logger()

SEED_PASSWORD = "Test1234!"

USERS = [
    ("john.doe@example.com", "John Doe"),
    ("jane.smith@example.com", "Jane Smith"),
    ("bob.wilson@example.com", "Bob Wilson"),
]

JOHN, JANE, BOB = (email for email, _ in USERS)


def _due(day: str) -> datetime:
    return datetime.fromisoformat(day).replace(tzinfo=timezone.utc)


# (title, description, status, priority, creator, assignee, due date)
ORGANIZATIONS = [
    {
        "name": "Acme Corporation",
        "slug": "acme-corp",
        "owner": JOHN,
        "members": [(JOHN, Role.OWNER), (JANE, Role.ADMIN), (BOB, Role.MEMBER)],
        "projects": [
            {
                "name": "Website Redesign",
                "description": "Complete overhaul of the company website with modern design",
                "status": ProjectStatus.ACTIVE,
                "creator": JOHN,
                "tasks": [
                    ("Design homepage mockup", "Create high-fidelity mockup for the new homepage",
                     TaskStatus.DONE, TaskPriority.HIGH, JOHN, JANE, _due("2025-01-15")),
                    ("Implement responsive navigation", "Build mobile-friendly navigation menu",
                     TaskStatus.IN_PROGRESS, TaskPriority.HIGH, JOHN, BOB, _due("2025-02-01")),
                    ("Set up contact form", "Create and integrate contact form with backend",
                     TaskStatus.TODO, TaskPriority.MEDIUM, JANE, BOB, _due("2025-02-10")),
                    ("Optimize images for web", "Compress and optimize all images for faster loading",
                     TaskStatus.TODO, TaskPriority.LOW, BOB, None, _due("2025-02-15")),
                    ("Write SEO meta descriptions", "Create compelling meta descriptions for all pages",
                     TaskStatus.TODO, TaskPriority.MEDIUM, JOHN, JANE, None),
                ],
            },
            {
                "name": "Mobile App Development",
                "description": "Native iOS and Android apps for customer engagement",
                "status": ProjectStatus.ACTIVE,
                "creator": JANE,
                "tasks": [
                    ("Set up React Native project", "Initialize project with Expo and configure dependencies",
                     TaskStatus.DONE, TaskPriority.URGENT, JANE, BOB, None),
                    ("Design app icon and splash screen", "Create branded app icon and loading screen",
                     TaskStatus.IN_PROGRESS, TaskPriority.HIGH, JANE, JANE, None),
                    ("Implement user authentication", "Add login, signup, and password reset flows",
                     TaskStatus.TODO, TaskPriority.URGENT, JOHN, BOB, None),
                    ("Build product catalog screen", "Display products with search and filter options",
                     TaskStatus.TODO, TaskPriority.HIGH, JANE, None, None),
                ],
            },
            {
                "name": "Q1 Marketing Campaign",
                "description": "Launch new product marketing campaign",
                "status": ProjectStatus.COMPLETED,
                "creator": BOB,
                "tasks": [
                    ("Plan social media strategy", "Define content calendar and posting schedule",
                     TaskStatus.DONE, TaskPriority.HIGH, BOB, JOHN, None),
                    ("Create email templates", "Design responsive email templates for campaign",
                     TaskStatus.DONE, TaskPriority.MEDIUM, BOB, JANE, None),
                ],
            },
        ],
    },
    {
        "name": "Tech Innovators",
        "slug": "tech-innovators",
        "owner": JANE,
        "members": [(JANE, Role.OWNER), (JOHN, Role.MEMBER)],
        "projects": [
            {
                "name": "AI Assistant Platform",
                "description": "Build intelligent assistant for customer support",
                "status": ProjectStatus.ACTIVE,
                "creator": JANE,
                "tasks": [
                    ("Research AI models", "Evaluate candidate language models for our use case",
                     TaskStatus.IN_PROGRESS, TaskPriority.HIGH, JANE, JOHN, None),
                    ("Design conversation flow", "Map out user journey and conversation paths",
                     TaskStatus.TODO, TaskPriority.MEDIUM, JANE, None, None),
                ],
            },
        ],
    },
]


@dataclass
class SeedReport:
    users_created: list[str] = field(default_factory=list)
    organizations_created: list[str] = field(default_factory=list)
    projects_created: int = 0
    tasks_created: int = 0


async def seed(database: Database) -> SeedReport:
    """Insert the demo users, organizations, projects and tasks."""
    report = SeedReport()
    async with database.session_factory() as session:
        users: dict[str, User] = {}
        password_hash = None
        for email, name in USERS:
            user = (
                await session.execute(select(User).where(User.email == email))
            ).scalars().first()
            if user is None:
                password_hash = password_hash or hash_password(SEED_PASSWORD)
                user = User(email=email, name=name, password_hash=password_hash)
                session.add(user)
                report.users_created.append(email)
            users[email] = user
        await session.flush()

        for org_data in ORGANIZATIONS:
            existing = await session.execute(
                select(Organization.id).where(Organization.slug == org_data["slug"])
            )
            if existing.first():
                continue

            org = Organization(
                name=org_data["name"], slug=org_data["slug"], owner_id=users[org_data["owner"]].id
            )
            for email, role in org_data["members"]:
                org.members.append(OrganizationMember(user_id=users[email].id, role=role))

            for project_data in org_data["projects"]:
                project = Project(
                    name=project_data["name"],
                    description=project_data["description"],
                    status=project_data["status"],
                    creator_id=users[project_data["creator"]].id,
                )
                for title, description, status, priority, creator, assignee, due in project_data["tasks"]:
                    project.tasks.append(
                        Task(
                            title=title,
                            description=description,
                            status=status,
                            priority=priority,
                            creator_id=users[creator].id,
                            assignee_id=users[assignee].id if assignee else None,
                            due_date=due,
                        )
                    )
                    report.tasks_created += 1
                org.projects.append(project)
                report.projects_created += 1

            session.add(org)
            report.organizations_created.append(org_data["slug"])

        await session.commit()

    logger.info(
        "seed.completed",
        users=len(report.users_created),
        organizations=len(report.organizations_created),
        projects=report.projects_created,
        tasks=report.tasks_created,
    )
    return report
