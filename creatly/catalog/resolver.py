"""Catalog Resolver.

Read-only joins answering "which offers unlock this?" for a package, a
module or a whole course. Nothing here writes.
"""

from uuid import UUID

from creatly.core.errors import DomainError, ErrorCode
from creatly.offers.models import Offer
from creatly.offers.repository import OfferRepository

from .repository import CourseRepository, ModuleRepository, PackageRepository


class CourseNotFoundError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.COURSE_NOT_FOUND, message)


class CourseModuleNotFoundError(DomainError):
    def __init__(self, message: str | None = None):
        super().__init__(ErrorCode.MODULE_NOT_FOUND, message)


class CatalogResolver:
    """Resolves package, module and course ids to the offers granting them."""

    def __init__(
        self,
        offers: OfferRepository,
        modules: ModuleRepository,
        packages: PackageRepository,
        courses: CourseRepository,
    ):
        self.offers = offers
        self.modules = modules
        self.packages = packages
        self.courses = courses

    async def offers_for_package(self, school_id: UUID, package_id: UUID) -> list[Offer]:
        """The school's offers whose package set contains the package."""
        offers = await self.offers.get_by_school(school_id)
        return [offer for offer in offers if offer.grants(package_id)]

    async def offers_for_module(self, school_id: UUID, module_id: UUID) -> list[Offer]:
        """Offers granting the module's package.

        Free modules are resolved the same way; being free does not change
        which offers include them.

        Raises:
            CourseModuleNotFoundError: If the module does not exist
        """
        module = await self.modules.get_by_id(module_id)
        if module is None:
            raise CourseModuleNotFoundError

        return await self.offers_for_package(school_id, module.package_id)

    async def offers_for_course(self, course_id: UUID) -> list[Offer]:
        """Union of offers granting any package of the course, without duplicates.

        Raises:
            CourseNotFoundError: If the course does not exist
        """
        course = await self.courses.get_by_id(course_id)
        if course is None:
            raise CourseNotFoundError

        packages = await self.packages.get_by_course(course_id)
        if not packages:
            return []

        offers = await self.offers.get_by_packages([pkg.id for pkg in packages])

        # Repositories may return an offer once per matching package
        unique: dict[UUID, Offer] = {}
        for offer in offers:
            unique.setdefault(offer.id, offer)
        return list(unique.values())
