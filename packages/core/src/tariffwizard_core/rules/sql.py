from __future__ import annotations

from collections.abc import Iterable

from pydantic import ValidationError
from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, Text, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from tariffwizard_core.errors import RepositoryUnavailableError
from tariffwizard_core.rules.models import DutyRule, RuleLine, ValueBasis


class Base(DeclarativeBase):
    pass


class DutyRuleRecord(Base):
    __tablename__ = "duty_rules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rule_number: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    classification_code: Mapped[str] = mapped_column(String, nullable=False, index=True)
    origin_country: Mapped[str] = mapped_column(String, nullable=False)
    rule_type: Mapped[str] = mapped_column(String, nullable=False, default="Simple")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lines: Mapped[list[RuleLineRecord]] = relationship(
        back_populates="rule",
        cascade="all, delete-orphan",
        order_by="RuleLineRecord.position",
    )


class RuleLineRecord(Base):
    __tablename__ = "rule_lines"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rule_id: Mapped[int] = mapped_column(ForeignKey("duty_rules.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    reference_code: Mapped[str] = mapped_column(String, nullable=False)
    rate_pct: Mapped[float] = mapped_column(Float, nullable=False)
    value_basis: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    rule: Mapped[DutyRuleRecord] = relationship(back_populates="lines")


def create_engine_from_url(database_url: str) -> Engine:
    if database_url.startswith("sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite:"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url)


def create_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


class SqlRuleRepository:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def create_schema(self) -> None:
        try:
            with self._session_factory() as session:
                Base.metadata.create_all(bind=session.get_bind())
        except SQLAlchemyError as exc:
            raise RepositoryUnavailableError(f"Cannot create duty rule tables: {exc}") from exc

    def add_rules(self, rules: Iterable[DutyRule]) -> int:
        count = 0
        try:
            with self._session_factory() as session:
                for rule in rules:
                    session.add(_to_record(rule))
                    count += 1
                session.commit()
        except SQLAlchemyError as exc:
            raise RepositoryUnavailableError(f"Cannot store duty rules: {exc}") from exc
        return count

    def find_active_rule_lines(
        self,
        classification_code: str,
        origin_country: str,
    ) -> list[RuleLine]:
        statement = (
            select(RuleLineRecord)
            .join(DutyRuleRecord, RuleLineRecord.rule_id == DutyRuleRecord.id)
            .where(
                DutyRuleRecord.classification_code == classification_code.strip(),
                DutyRuleRecord.origin_country == origin_country.strip().upper(),
                DutyRuleRecord.is_active.is_(True),
                RuleLineRecord.is_active.is_(True),
            )
            .order_by(DutyRuleRecord.rule_number, RuleLineRecord.position, RuleLineRecord.id)
        )
        try:
            with self._session_factory() as session:
                records = session.scalars(statement).all()
                return [_to_line(record) for record in records]
        except SQLAlchemyError as exc:
            raise RepositoryUnavailableError(f"Duty rule lookup failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise RepositoryUnavailableError(f"Stored duty rule line is invalid: {exc}") from exc


def _to_record(rule: DutyRule) -> DutyRuleRecord:
    return DutyRuleRecord(
        rule_number=rule.rule_number,
        classification_code=rule.classification_code.strip(),
        origin_country=rule.origin_country.strip().upper(),
        rule_type=rule.rule_type,
        is_active=rule.is_active,
        lines=[
            RuleLineRecord(
                position=position,
                reference_code=line.reference_code,
                rate_pct=line.rate_pct,
                value_basis=line.value_basis.value,
                description=line.description,
                is_active=line.is_active,
            )
            for position, line in enumerate(rule.lines)
        ],
    )


def _to_line(record: RuleLineRecord) -> RuleLine:
    return RuleLine(
        reference_code=record.reference_code,
        rate_pct=record.rate_pct,
        value_basis=ValueBasis(record.value_basis),
        description=record.description,
        is_active=record.is_active,
    )
