import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tetelek.auth.dependencies import get_current_user, require_superuser
from tetelek.database import ensure_tetel_schema, get_db
from tetelek.models.tetel import Osszegzes, Section, Subsection, Tetel
from tetelek.schemas import tetel as schemas
from tetelek.services.credential_store import StoredUser

router = APIRouter(tags=['tetelek'])

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'
TETEL_NOT_FOUND = 'A tétel nem található.'


def ensure_database_ready() -> None:
    try:
        ensure_tetel_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


def load_tetel_details(tetel_id: int, db: Session) -> schemas.TetelDetailsResponse | None:
    tetel = db.query(Tetel).filter(Tetel.id == tetel_id).first()
    if tetel is None:
        return None

    sections = db.query(Section).filter(
        Section.tetel_id == tetel_id,
    ).order_by(Section.position.asc(), Section.id.asc()).all()

    subsections_by_section: dict[int, list[schemas.Subsection]] = {}
    if sections:
        subsections = db.query(Subsection).filter(
            Subsection.section_id.in_([section.id for section in sections]),
        ).order_by(Subsection.position.asc(), Subsection.id.asc()).all()
        for subsection in subsections:
            subsections_by_section.setdefault(subsection.section_id, []).append(
                schemas.Subsection.model_validate(subsection)
            )

    osszegzes = db.query(Osszegzes).filter(Osszegzes.tetel_id == tetel_id).first()

    return schemas.TetelDetailsResponse(
        tetel=schemas.TetelSummary.model_validate(tetel),
        sections=[
            schemas.Section(
                id=section.id,
                content=section.content,
                subsections=subsections_by_section.get(section.id, []),
            )
            for section in sections
        ],
        osszegzes=schemas.Osszegzes.model_validate(osszegzes) if osszegzes else None,
    )


@router.get('', response_model=list[schemas.TetelSummary])
def list_tetelek(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        return db.query(Tetel).order_by(Tetel.id.asc()).all()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


@router.get('/{tetel_id}/details', response_model=schemas.TetelDetailsResponse)
def get_tetel_details(tetel_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        details = load_tetel_details(tetel_id, db)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc

    if details is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TETEL_NOT_FOUND)
    return details


@router.put('/{tetel_id}', response_model=schemas.TetelDetailsResponse)
def update_tetel(
    tetel_id: int,
    data: schemas.UpdateTetelRequest,
    current_user: StoredUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Rename a study item and replace its summary. Any signed-in user may edit."""
    ensure_database_ready()

    try:
        tetel = db.query(Tetel).filter(Tetel.id == tetel_id).first()
        if tetel is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TETEL_NOT_FOUND)

        tetel.name = data.name

        osszegzes = db.query(Osszegzes).filter(Osszegzes.tetel_id == tetel_id).first()
        if data.osszegzes is None:
            if osszegzes is not None:
                db.delete(osszegzes)
        elif osszegzes is None:
            db.add(Osszegzes(tetel_id=tetel_id, content=data.osszegzes))
        else:
            osszegzes.content = data.osszegzes

        db.commit()
        logger.info('Tétel %s updated by %s', tetel_id, current_user.username)

        return load_tetel_details(tetel_id, db)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


@router.delete('/{tetel_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_tetel(
    tetel_id: int,
    current_user: StoredUser = Depends(require_superuser),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        tetel = db.query(Tetel).filter(Tetel.id == tetel_id).first()
        if tetel is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=TETEL_NOT_FOUND)

        section_ids = [
            section_id for (section_id,) in db.query(Section.id).filter(Section.tetel_id == tetel_id).all()
        ]
        if section_ids:
            db.query(Subsection).filter(Subsection.section_id.in_(section_ids)).delete(synchronize_session=False)
        db.query(Section).filter(Section.tetel_id == tetel_id).delete(synchronize_session=False)
        db.query(Osszegzes).filter(Osszegzes.tetel_id == tetel_id).delete(synchronize_session=False)
        db.delete(tetel)
        db.commit()
        logger.info('Tétel %s deleted by %s', tetel_id, current_user.username)
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc
