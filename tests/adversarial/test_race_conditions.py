"""
Adversarial tests for race condition prevention.

Verifies that concurrent calls on one registry are serialized, preventing
attackers from exploiting interleavings to:
- Obtain duplicate or skipped credential ids
- Corrupt the per-issuer index
- Observe a half-applied issuance or revocation
- Win an ownership race after losing the owner role

Security rationale:
- Ids must be exactly 1..N for every observer
- Issuance and revocation must be atomic with respect to readers
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from credochain.adapters.repository.memory import InMemoryRegistryRepository
from credochain.domain.exceptions import Unauthorized
from credochain.domain.registry import CredentialRegistry
from tests.helpers import ALL_ISSUERS, ISSUER_A, OUTSIDER, OWNER, SUBJECT

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


class TestConcurrentIssuance:
    """Concurrent issuance from many threads."""

    def test_concurrent_issuance_ids_are_dense(self, registry: CredentialRegistry) -> None:
        """
        Many threads issue at once.

        Expected defense: the registry lock serializes id allocation, so the
        returned ids are exactly 1..N with no duplicates or gaps.
        """
        num_workers = 16
        per_worker = 25
        results: list[int] = []
        results_lock = threading.Lock()

        def issue_batch(worker: int) -> None:
            issuer = ALL_ISSUERS[worker % len(ALL_ISSUERS)]
            for n in range(per_worker):
                credential_id = registry.issue_credential(issuer, SUBJECT, f"Qm{worker}-{n}")
                with results_lock:
                    results.append(credential_id)

        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            futures = [executor.submit(issue_batch, w) for w in range(num_workers)]
            for f in futures:
                f.result()

        total = num_workers * per_worker
        assert sorted(results) == list(range(1, total + 1))
        assert registry.get_total_credentials() == total

    def test_concurrent_issuance_index_consistent(
        self, registry: CredentialRegistry, repository: InMemoryRegistryRepository
    ) -> None:
        """
        After concurrent issuance, every issuer's list matches the records.

        Each list is strictly increasing (issuance order) and together the
        lists partition 1..N. The persisted copy agrees with memory.
        """
        with ThreadPoolExecutor(max_workers=12) as executor:
            list(
                executor.map(
                    lambda n: registry.issue_credential(ALL_ISSUERS[n % 3], SUBJECT, f"Qm{n}"),
                    range(300),
                )
            )

        all_ids: list[int] = []
        for issuer in ALL_ISSUERS:
            ids = registry.get_credentials_by_issuer(issuer)
            assert ids == sorted(ids)
            assert all(registry.verify_credential(i).issuer == issuer for i in ids)
            all_ids.extend(ids)

        assert sorted(all_ids) == list(range(1, 301))

        stored = repository.load()
        assert stored.credential_count == 300
        assert stored.issuer_index == {i: registry.get_credentials_by_issuer(i) for i in ALL_ISSUERS}

    def test_readers_never_see_partial_issuance(self, registry: CredentialRegistry) -> None:
        """
        Readers running during issuance always see a complete state.

        Whenever the total is T, credential T is verifiable and appears in
        its issuer's list.
        """
        stop = threading.Event()
        violations: list[str] = []

        def reader() -> None:
            while not stop.is_set():
                total = registry.get_total_credentials()
                if total == 0:
                    continue
                credential = registry.verify_credential(total)
                if total not in registry.get_credentials_by_issuer(credential.issuer):
                    violations.append(f"id {total} missing from index")

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for thread in readers:
            thread.start()
        try:
            for n in range(500):
                registry.issue_credential(ALL_ISSUERS[n % 3], SUBJECT, f"Qm{n}")
        finally:
            stop.set()
            for thread in readers:
                thread.join()

        assert violations == []


class TestConcurrentRevocation:
    """Concurrent revocation attempts."""

    def test_concurrent_revoke_by_issuer_and_attackers(self, registry: CredentialRegistry) -> None:
        """
        Issuer and attackers race to revoke the same credential.

        Expected defense: every attacker is rejected, the issuer's call
        succeeds (idempotently, if repeated), and the credential ends revoked.
        """
        credential_id = registry.issue_credential(ISSUER_A, SUBJECT, "QmX")
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()

        def attempt(caller: str) -> None:
            try:
                registry.revoke_credential(caller, credential_id)
                outcome = "ok"
            except Unauthorized:
                outcome = "denied"
            with outcomes_lock:
                outcomes.append(f"{caller}:{outcome}")

        callers = [ISSUER_A] * 5 + [OUTSIDER] * 5 + [OWNER] * 5
        with ThreadPoolExecutor(max_workers=len(callers)) as executor:
            list(executor.map(attempt, callers))

        assert outcomes.count(f"{ISSUER_A}:ok") == 5
        assert outcomes.count(f"{OUTSIDER}:denied") == 5
        assert outcomes.count(f"{OWNER}:denied") == 5
        assert registry.verify_credential(credential_id).revoked is True
        assert registry.is_credential_valid(credential_id) is False


class TestOwnershipRace:
    """Concurrent governance calls."""

    def test_concurrent_transfers_single_winner_chain(self, registry: CredentialRegistry) -> None:
        """
        Several threads each try to transfer ownership away from OWNER.

        Expected defense: the first transfer wins; every later attempt by
        OWNER fails because OWNER is no longer the owner.
        """
        targets = [f"0x{n:040x}" for n in range(1, 11)]
        winners: list[str] = []
        winners_lock = threading.Lock()

        def attempt(target: str) -> None:
            try:
                registry.transfer_ownership(OWNER, target)
            except Unauthorized:
                return
            with winners_lock:
                winners.append(target)

        with ThreadPoolExecutor(max_workers=len(targets)) as executor:
            list(executor.map(attempt, targets))

        assert len(winners) == 1
        assert registry.get_owner() == winners[0]

    def test_renounce_races_with_add_issuer(self, registry: CredentialRegistry) -> None:
        """
        Renunciation races with issuer approvals.

        Expected defense: every approval that succeeded happened before the
        renunciation; none can succeed afterwards.
        """
        candidates = [f"0x{n:040x}" for n in range(100, 140)]
        approved: list[str] = []
        approved_lock = threading.Lock()

        def approve(identity: str) -> None:
            try:
                registry.add_issuer(OWNER, identity)
            except Unauthorized:
                return
            with approved_lock:
                approved.append(identity)

        with ThreadPoolExecutor(max_workers=8) as executor:
            futures = [executor.submit(approve, c) for c in candidates[:20]]
            futures.append(executor.submit(registry.renounce_ownership, OWNER))
            futures += [executor.submit(approve, c) for c in candidates[20:]]
            for f in futures:
                f.result()

        for identity in candidates:
            assert registry.is_issuer(identity) is (identity in approved)

        with pytest.raises(Unauthorized):
            registry.add_issuer(OWNER, candidates[0])
