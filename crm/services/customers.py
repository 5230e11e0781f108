"""Customer CRUD with pagination and email uniqueness."""

import logging

from sqlalchemy import delete, func, insert, select

from crm.core.database import Database, build_update
from crm.core.exceptions import ConflictError, ConstraintViolationError, NotFoundError
from crm.models.customer import Customer
from crm.schemas.customer import CustomerCreate, CustomerResponse, CustomerUpdate
from crm.schemas.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, Page, PaginationMeta

logger = logging.getLogger(__name__)

EMAIL_TAKEN = "Email already exists"

COLUMNS = (
    Customer.id,
    Customer.name,
    Customer.email,
    Customer.phone,
    Customer.company,
    Customer.address,
    Customer.created_at,
    Customer.updated_at,
)


class CustomerService:
    def __init__(self, db: Database) -> None:
        self.db = db

    def list_customers(
        self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT
    ) -> Page[CustomerResponse]:
        total = self.db.query(select(func.count().label("total")).select_from(Customer))[0]["total"]
        meta = PaginationMeta.from_counts(total=total, page=page, limit=limit)
        rows = self.db.query(
            select(*COLUMNS)
            .order_by(Customer.created_at.desc(), Customer.id.desc())
            .limit(limit)
            .offset(meta.offset)
        )
        return Page[CustomerResponse](
            data=[CustomerResponse.model_validate(r) for r in rows],
            pagination=meta,
        )

    def get_customer(self, customer_id: int) -> CustomerResponse:
        rows = self.db.query(select(*COLUMNS).where(Customer.id == customer_id))
        if not rows:
            raise NotFoundError("Customer", customer_id)
        return CustomerResponse.model_validate(rows[0])

    def _ensure_email_free(self, email: str, exclude_id: int | None = None) -> None:
        stmt = select(Customer.id).where(Customer.email == email)
        if exclude_id is not None:
            stmt = stmt.where(Customer.id != exclude_id)
        if self.db.query(stmt):
            raise ConflictError(EMAIL_TAKEN)

    def create_customer(self, data: CustomerCreate) -> CustomerResponse:
        self._ensure_email_free(data.email)
        try:
            result = self.db.insert(
                insert(Customer).values(**data.model_dump()).returning(Customer.id)
            )
        except ConstraintViolationError as e:
            # A concurrent create took the email after the pre-check.
            raise ConflictError(EMAIL_TAKEN) from e
        logger.info("Created customer id=%s", result.generated_id)
        return self.get_customer(result.generated_id)

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> CustomerResponse:
        self.get_customer(customer_id)

        patch = data.model_dump(exclude_unset=True)
        if not patch:
            return self.get_customer(customer_id)
        if "email" in patch:
            self._ensure_email_free(patch["email"], exclude_id=customer_id)

        try:
            self.db.update(build_update(Customer, customer_id, patch))
        except ConstraintViolationError as e:
            raise ConflictError(EMAIL_TAKEN) from e
        return self.get_customer(customer_id)

    def delete_customer(self, customer_id: int) -> None:
        self.get_customer(customer_id)
        result = self.db.delete(delete(Customer).where(Customer.id == customer_id))
        if result.rows_affected == 0:
            raise NotFoundError("Customer", customer_id)
        logger.info("Customer id=%s deleted", customer_id)
