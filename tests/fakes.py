"""In-memory repository doubles.

Each class satisfies the matching repository protocol so services can be
exercised without Cassandra. Conditional writes keep their compare-and-set
semantics.
"""

from copy import deepcopy
from datetime import datetime
from uuid import UUID

from creatly.catalog.models import Course, Lesson, Module, Package
from creatly.offers.models import Offer
from creatly.orders.models import Transaction, TransactionStatus
from creatly.promocodes.models import Promocode, normalize_code
from creatly.students.models import Student, Verification, normalize_email


class FakeCourseRepository:
    def __init__(self, *courses: Course):
        self.courses = {c.id: c for c in courses}

    async def get_by_id(self, course_id: UUID) -> Course | None:
        return self.courses.get(course_id)


class FakePackageRepository:
    def __init__(self, *packages: Package):
        self.packages = list(packages)

    async def get_by_course(self, course_id: UUID) -> list[Package]:
        found = [p for p in self.packages if p.course_id == course_id]
        return sorted(found, key=lambda p: p.position)


class FakeModuleRepository:
    def __init__(self, *modules: Module):
        self.modules = {m.id: m for m in modules}

    async def get_by_id(self, module_id: UUID) -> Module | None:
        return self.modules.get(module_id)


class FakeLessonRepository:
    def __init__(self, *lessons: Lesson):
        self.lessons = list(lessons)

    async def get_by_module(self, module_id: UUID) -> list[Lesson]:
        return [lesson for lesson in self.lessons if lesson.module_id == module_id]


class FakeOfferRepository:
    def __init__(self, *offers: Offer):
        self.offers: dict[UUID, Offer] = {o.id: o for o in offers}

    async def create(self, offer: Offer) -> None:
        self.offers[offer.id] = deepcopy(offer)

    async def get_by_id(self, offer_id: UUID) -> Offer | None:
        offer = self.offers.get(offer_id)
        return deepcopy(offer) if offer else None

    async def get_by_school(self, school_id: UUID) -> list[Offer]:
        return [deepcopy(o) for o in self.offers.values() if o.school_id == school_id]

    async def get_by_packages(self, package_ids: list[UUID]) -> list[Offer]:
        return [
            deepcopy(o)
            for o in self.offers.values()
            if any(p in o.package_ids for p in package_ids)
        ]

    async def update(self, offer: Offer) -> None:
        self.offers[offer.id] = deepcopy(offer)

    async def delete(self, school_id: UUID, offer_id: UUID) -> bool:
        offer = self.offers.get(offer_id)
        if offer is None or offer.school_id != school_id:
            return False
        del self.offers[offer_id]
        return True


class FakePromocodeRepository:
    def __init__(self, *promocodes: Promocode):
        self.promocodes: dict[UUID, Promocode] = {}
        self.codes: dict[tuple[UUID, str], UUID] = {}
        for promocode in promocodes:
            self.promocodes[promocode.id] = promocode
            self.codes[(promocode.school_id, promocode.code)] = promocode.id

    async def create(self, promocode: Promocode) -> bool:
        key = (promocode.school_id, promocode.code)
        if key in self.codes:
            return False
        self.codes[key] = promocode.id
        self.promocodes[promocode.id] = deepcopy(promocode)
        return True

    async def get_by_id(self, promocode_id: UUID) -> Promocode | None:
        promocode = self.promocodes.get(promocode_id)
        return deepcopy(promocode) if promocode else None

    async def get_by_code(self, school_id: UUID, code: str) -> Promocode | None:
        promocode_id = self.codes.get((school_id, normalize_code(code)))
        return await self.get_by_id(promocode_id) if promocode_id else None

    async def get_by_school(self, school_id: UUID) -> list[Promocode]:
        return [
            deepcopy(p) for p in self.promocodes.values() if p.school_id == school_id
        ]

    async def update(self, promocode: Promocode) -> None:
        self.promocodes[promocode.id] = deepcopy(promocode)

    async def delete(self, promocode: Promocode) -> None:
        self.promocodes.pop(promocode.id, None)
        self.codes.pop((promocode.school_id, promocode.code), None)


class FakeTransactionRepository:
    def __init__(self, *transactions: Transaction):
        self.transactions: dict[UUID, Transaction] = {t.id: t for t in transactions}
        self.transitions: list[tuple[UUID, TransactionStatus]] = []

    async def create(self, transaction: Transaction) -> bool:
        if transaction.id in self.transactions:
            return False
        self.transactions[transaction.id] = deepcopy(transaction)
        return True

    async def get_by_id(self, transaction_id: UUID) -> Transaction | None:
        transaction = self.transactions.get(transaction_id)
        return deepcopy(transaction) if transaction else None

    async def get_by_student(self, student_id: UUID) -> list[Transaction]:
        found = [
            deepcopy(t)
            for t in self.transactions.values()
            if t.student_id == student_id
        ]
        return sorted(found, key=lambda t: t.created_at, reverse=True)

    async def transition_status(
        self,
        transaction_id: UUID,
        expected: TransactionStatus,
        new: TransactionStatus,
        updated_at: datetime,
    ) -> bool:
        transaction = self.transactions.get(transaction_id)
        if transaction is None or transaction.status != expected:
            return False
        transaction.status = new
        transaction.updated_at = updated_at
        self.transitions.append((transaction_id, new))
        return True


class FakeStudentRepository:
    def __init__(self, *students: Student):
        self.students: dict[UUID, Student] = {s.id: s for s in students}

    def _find(self, school_id: UUID, email: str) -> Student | None:
        email = normalize_email(email)
        for student in self.students.values():
            if student.school_id == school_id and student.email == email:
                return student
        return None

    async def create(self, student: Student) -> bool:
        if self._find(student.school_id, student.email):
            return False
        self.students[student.id] = deepcopy(student)
        return True

    async def get_by_id(self, student_id: UUID) -> Student | None:
        student = self.students.get(student_id)
        return deepcopy(student) if student else None

    async def get_by_email(self, school_id: UUID, email: str) -> Student | None:
        student = self._find(school_id, email)
        return deepcopy(student) if student else None

    async def get_by_verification_code(self, code_hash: str) -> Student | None:
        for student in self.students.values():
            if code_hash and student.verification.code_hash == code_hash:
                return deepcopy(student)
        return None

    async def mark_verified(self, student_id: UUID, code_hash: str) -> bool:
        student = self.students.get(student_id)
        if student is None or student.verification.code_hash != code_hash:
            return False
        student.verification = Verification(code_hash="", verified=True)
        return True

    async def record_sign_in(
        self, student_id: UUID, at: datetime, password_hash: str | None = None
    ) -> None:
        student = self.students[student_id]
        student.last_visit_at = at
        if password_hash:
            student.password_hash = password_hash


class RecordingNotifier:
    """Keeps issued verification codes instead of sending them."""

    def __init__(self):
        self.sent: list[dict[str, str]] = []

    async def send_verification_code(self, *, name: str, email: str, code: str) -> None:
        self.sent.append({"name": name, "email": email, "code": code})

    @property
    def last_code(self) -> str:
        return self.sent[-1]["code"]
