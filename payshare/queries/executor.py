"""
Job History Queries

DESIGN DECISION: Queries only ever read what the ledger stored.
Figures are summed from stored distributions; nothing is recomputed,
so history always matches what each job recorded at the time.
"""

import math
from typing import Optional

from payshare.models.job import Frequency, JobPage, JobRecord, JobStats
from payshare.services.storage import JobStorageInterface


class QueryExecutionError(Exception):
    """Error during query execution."""
    pass


class JobQueryExecutor:
    """
    Executes history and statistics queries against job storage.

    GUARANTEES:
    - Only returns the owner's own jobs
    - Empty history gives zeroed stats, never an error
    """

    def __init__(self, storage: JobStorageInterface):
        self._storage = storage

    async def list_page(
        self,
        owner_id: str,
        search: Optional[str] = None,
        frequency: Optional[Frequency] = None,
        page: int = 1,
        limit: int = 50,
    ) -> JobPage:
        """
        One page of an owner's jobs, newest first.

        Raises:
            QueryExecutionError: If page or limit is below 1
        """
        if page < 1:
            raise QueryExecutionError(f"Page must be at least 1, got {page}")
        if limit < 1:
            raise QueryExecutionError(f"Limit must be at least 1, got {limit}")

        search = search.strip() if search else None
        total = await self._storage.count_jobs(owner_id, search=search, frequency=frequency)
        jobs = await self._storage.list_jobs(
            owner_id,
            search=search,
            frequency=frequency,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return JobPage(
            jobs=jobs,
            page=page,
            pages=math.ceil(total / limit),
            total=total,
        )

    async def _all_jobs(self, owner_id: str) -> list[JobRecord]:
        total = await self._storage.count_jobs(owner_id)
        if total == 0:
            return []
        return await self._storage.list_jobs(owner_id, limit=total)

    async def stats(self, owner_id: str) -> JobStats:
        """Totals over every job the owner has recorded."""
        jobs = await self._all_jobs(owner_id)
        if not jobs:
            return JobStats()

        revenue = sum(job.request.payment_amount for job in jobs)
        return JobStats(
            total_jobs=len(jobs),
            total_revenue=revenue,
            total_company_earnings=sum(job.distribution.company for job in jobs),
            total_developer_earnings=sum(job.distribution.working_dev for job in jobs),
            unique_developers=len({job.request.roles.working_dev.strip() for job in jobs}),
            average_job_value=revenue / len(jobs),
        )

    async def earnings_by_person(self, owner_id: str) -> dict[str, float]:
        """
        Total each person has earned across the owner's jobs.

        Blank roles earn nothing, so only paid shares are counted.
        """
        jobs = await self._all_jobs(owner_id)
        earnings: dict[str, float] = {}

        def add(person: str, amount: float) -> None:
            if amount:
                earnings[person] = earnings.get(person, 0.0) + amount

        for job in jobs:
            roles = job.request.roles
            dist = job.distribution
            add(roles.working_dev.strip(), dist.working_dev)
            add(roles.effective_job_hunter, dist.job_hunter)
            add(roles.effective_communicator, dist.communicator)
            for share in dist.intern_shares:
                add(share.name, share.amount)

        return earnings
