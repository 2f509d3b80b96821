"""FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from volunteer_slots.config import settings
from volunteer_slots.database import Base, SessionLocal, engine
from volunteer_slots.logging_config import setup_logging

# Import routers
from volunteer_slots.routers import anonymous, attendance, organizations, projects, signups, users
from volunteer_slots.services.status_reconciler import StatusReconciler

# Import all models so Base.metadata knows about them
from volunteer_slots.models.user import User, UserEmail                              # noqa: F401
from volunteer_slots.models.organization import Organization, OrganizationMember     # noqa: F401
from volunteer_slots.models.project import Project                                   # noqa: F401
from volunteer_slots.models.signup import Signup                                     # noqa: F401
from volunteer_slots.models.anonymous_signup import AnonymousSignup                  # noqa: F401
from volunteer_slots.models.slot_counter import SlotCounter                          # noqa: F401

setup_logging()

app = FastAPI(
    title="Volunteer Slots",
    description="Volunteer project scheduling with per-slot capacity and anonymous signups",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(organizations.router, prefix="/api/organizations", tags=["Organizations"])
app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
app.include_router(signups.router, prefix="/api/signups", tags=["Signups"])
app.include_router(anonymous.router, prefix="/api/anonymous", tags=["Anonymous"])
app.include_router(attendance.router, prefix="/api/attend", tags=["Attendance"])

reconciler = StatusReconciler(SessionLocal)


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode) and start the reconciler."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    if settings.RECONCILE_INTERVAL_SECONDS > 0:
        reconciler.start()


@app.on_event("shutdown")
def on_shutdown():
    if reconciler.running:
        reconciler.stop()


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
