from arena.core.database import SessionLocal

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Caller identity dependencies live in arena.core.security (get_current_user, require_organizer).
