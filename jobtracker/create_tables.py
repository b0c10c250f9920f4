from sqlalchemy.orm import Session

from jobtracker.db import engine, Base
from jobtracker import models  # registers the tables on Base.metadata

DEFAULT_TEMPLATE_NAME = "Classic"


def init_db(bind=engine) -> None:
    """Create all tables and make sure a default resume template exists."""
    Base.metadata.create_all(bind=bind)
    with Session(bind=bind) as db:
        has_default = (
            db.query(models.ResumeTemplate)
            .filter(models.ResumeTemplate.is_default.is_(True))
            .first()
        )
        if has_default is None:
            db.add(models.ResumeTemplate(name=DEFAULT_TEMPLATE_NAME, is_default=True))
            db.commit()


if __name__ == "__main__":
    init_db()
