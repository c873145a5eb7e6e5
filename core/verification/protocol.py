"""
Sealed-Chunk Verification Protocol

State machine per chunk:

    HASHING -> PROOF_CHECKING -> ANCHOR_CHECKING -> VERIFIED
        |             |                 |
        +-------------+-----------------+--> FAILED(layer)

1. HASHING: re-hash the current content; mismatch with the stored digest
   -> FAILED(hash). This is the only layer that sees direct content edits
   and it short-circuits: no proof check, no ledger call.
2. PROOF_CHECKING: fold the stored digest through the stored proof and
   compare with the stored root -> FAILED(proof) on mismatch.
3. ANCHOR_CHECKING: ask the ledger whether the root is published, bounded
   by a timeout. Not found -> FAILED(anchor, not_found); timeout or
   unreachable ledger -> FAILED(anchor, unreachable).

Local checks run before the network call. Verification failures are
returned as verdicts, never raised.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from core.anchor.base import AnchorClient
from core.crypto.hashing import digest_from_hex, hash_text_hex
from core.merkle.merkle_tree import verify_merkle_proof
from core.schemas.anchor import AnchorLookup
from core.schemas.chunks import SealedChunk, SealedDocument
from core.schemas.errors import LedgerUnavailableError
from core.schemas.verification import (
    BatchVerification,
    FailedLayer,
    VerifiableSource,
    VerificationStage,
    VerificationVerdict,
)
from core.storage.base import ChunkStore


logger = logging.getLogger(__name__)


DEFAULT_ANCHOR_TIMEOUT_S = 10.0
DEFAULT_MAX_WORKERS = 8


class _Trace:
    """Collects visited stages and per-layer timings for one verification."""

    def __init__(self, chunk_id: Optional[str]) -> None:
        self.chunk_id = chunk_id
        self.trail: list[VerificationStage] = []
        self.timings_ms: dict[str, float] = {}

    def enter(self, stage: VerificationStage) -> None:
        self.trail.append(stage)

    @contextmanager
    def timed(self, layer: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.timings_ms[layer] = round((time.perf_counter() - started) * 1000, 3)

    def fail(
        self,
        layer: FailedLayer,
        detail: str,
        *,
        anchor_failure: Optional[str] = None,
    ) -> VerificationVerdict:
        self.enter(VerificationStage.FAILED)
        logger.info(f"Chunk {self.chunk_id or '?'} failed at {layer} layer: {detail}")
        return VerificationVerdict(
            verified=False,
            failed_layer=layer,
            detail=detail,
            anchor_failure=anchor_failure,
            chunk_id=self.chunk_id,
            stage_trail=list(self.trail),
            timings_ms=dict(self.timings_ms),
        )

    def succeed(self, lookup: AnchorLookup) -> VerificationVerdict:
        self.enter(VerificationStage.VERIFIED)
        logger.debug(f"Chunk {self.chunk_id or '?'} verified ({self.timings_ms})")
        return VerificationVerdict(
            verified=True,
            detail="Content matches its sealed digest, proof and anchored root",
            anchor_timestamp=lookup.timestamp,
            anchor_document_id=lookup.document_id,
            chunk_id=self.chunk_id,
            stage_trail=list(self.trail),
            timings_ms=dict(self.timings_ms),
        )


def _run_local_checks(source: VerifiableSource, trace: _Trace) -> Optional[VerificationVerdict]:
    """Steps 1 and 2. Returns a failed verdict, or None if both passed."""
    trace.enter(VerificationStage.HASHING)
    with trace.timed("hash"):
        recomputed = hash_text_hex(source.content)
    if recomputed != source.content_digest:
        return trace.fail("hash", "Chunk hash mismatch - content may have been modified")

    trace.enter(VerificationStage.PROOF_CHECKING)
    with trace.timed("proof"):
        proof_ok = verify_merkle_proof(
            digest_from_hex(source.content_digest),
            source.proof,
            digest_from_hex(source.merkle_root),
        )
    if not proof_ok:
        return trace.fail("proof", "Invalid Merkle proof - proof chain is broken")

    return None


def _anchor_verdict(
    trace: _Trace,
    lookup: Optional[AnchorLookup],
    unreachable_detail: Optional[str],
) -> VerificationVerdict:
    """Step 3 outcome, given either a lookup result or why there is none."""
    if lookup is None:
        return trace.fail(
            "anchor",
            f"Ledger unreachable: {unreachable_detail}",
            anchor_failure="unreachable",
        )
    if not lookup.exists:
        return trace.fail(
            "anchor",
            "Merkle root not found on ledger",
            anchor_failure="not_found",
        )
    return trace.succeed(lookup)


def check_local(source: VerifiableSource) -> Optional[VerificationVerdict]:
    """
    Run only the hash and proof layers.

    Pure and offline. Returns the failed verdict, or None when the chunk
    passes both local layers and only the anchor check remains.
    """
    return _run_local_checks(source, _Trace(source.chunk_id))


class SealedChunkVerifier:
    """
    Runs the verification protocol against an anchor client.

    Holds a thread pool used to bound anchor lookups by a timeout and to
    run the lookups of a batch concurrently. Holds no anchor cache.

    Usage:
        with SealedChunkVerifier(anchor_service, anchor_timeout_s=5) as verifier:
            verdict = verifier.verify(source)
            batch = verifier.verify_many(sources)
    """

    def __init__(
        self,
        anchor_client: AnchorClient,
        *,
        anchor_timeout_s: float = DEFAULT_ANCHOR_TIMEOUT_S,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.anchor_client = anchor_client
        self.anchor_timeout_s = anchor_timeout_s
        self.max_workers = max(1, max_workers)
        self._executor: Optional[concurrent.futures.ThreadPoolExecutor] = None

    def _get_executor(self) -> concurrent.futures.ThreadPoolExecutor:
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="anchor-lookup",
            )
        return self._executor

    def _lookup_with_timeout(
        self,
        root: str,
    ) -> tuple[Optional[AnchorLookup], Optional[str]]:
        future = self._get_executor().submit(self.anchor_client.lookup, root)
        return self._collect(future, self.anchor_timeout_s)

    def _collect(
        self,
        future: "concurrent.futures.Future[AnchorLookup]",
        timeout: Optional[float],
    ) -> tuple[Optional[AnchorLookup], Optional[str]]:
        try:
            return future.result(timeout=timeout), None
        except concurrent.futures.TimeoutError:
            # The worker thread keeps running; its result is discarded
            future.cancel()
            return None, f"lookup timed out after {self.anchor_timeout_s}s"
        except LedgerUnavailableError as e:
            return None, e.message

    def verify(self, source: VerifiableSource) -> VerificationVerdict:
        """
        Verify one chunk through all three layers.

        Returns:
            VerificationVerdict (never raises for verification failures)
        """
        trace = _Trace(source.chunk_id)
        failed = _run_local_checks(source, trace)
        if failed is not None:
            return failed

        trace.enter(VerificationStage.ANCHOR_CHECKING)
        with trace.timed("anchor"):
            lookup, error = self._lookup_with_timeout(source.merkle_root)
        return _anchor_verdict(trace, lookup, error)

    def verify_many(self, sources: Sequence[VerifiableSource]) -> BatchVerification:
        """
        Verify every chunk backing one answer.

        Local layers run first for all chunks. Then one anchor lookup is
        dispatched per unique root among the chunks that passed, all
        concurrently, and joined under a single timeout before the
        aggregate is reported.
        """
        traces = [_Trace(s.chunk_id) for s in sources]
        verdicts: list[Optional[VerificationVerdict]] = [
            _run_local_checks(source, trace) for source, trace in zip(sources, traces)
        ]

        pending_roots = sorted({
            source.merkle_root
            for source, verdict in zip(sources, verdicts)
            if verdict is None
        })

        outcomes: dict[str, tuple[Optional[AnchorLookup], Optional[str], float]] = {}
        if pending_roots:
            started = time.perf_counter()
            executor = self._get_executor()
            futures = {
                root: executor.submit(self.anchor_client.lookup, root)
                for root in pending_roots
            }
            logger.debug(f"Dispatched {len(futures)} anchor lookups for {len(sources)} chunks")
            concurrent.futures.wait(list(futures.values()), timeout=self.anchor_timeout_s)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
            for root, future in futures.items():
                # Already done or timed out: no further waiting here
                lookup, error = self._collect(future, 0)
                outcomes[root] = (lookup, error, elapsed_ms)

        results: list[VerificationVerdict] = []
        for source, trace, verdict in zip(sources, traces, verdicts):
            if verdict is not None:
                results.append(verdict)
                continue
            lookup, error, elapsed_ms = outcomes[source.merkle_root]
            trace.enter(VerificationStage.ANCHOR_CHECKING)
            trace.timings_ms["anchor"] = elapsed_ms
            results.append(_anchor_verdict(trace, lookup, error))

        batch = BatchVerification(
            all_verified=bool(results) and all(v.verified for v in results),
            verdicts=results,
        )
        if not batch.all_verified:
            logger.warning(f"{batch.failed_count} of {len(results)} chunks failed verification")
        return batch

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> "SealedChunkVerifier":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def source_from_chunk(chunk: SealedChunk, document: SealedDocument) -> VerifiableSource:
    """Assemble the verification input for a stored chunk."""
    return VerifiableSource(
        content=chunk.content,
        content_digest=chunk.content_digest,
        inclusion_proof=list(chunk.inclusion_proof),
        merkle_root=document.merkle_root,
        anchor_reference=document.anchor_tx_ref,
        chunk_id=chunk.id,
    )


def sources_for_document(
    store: ChunkStore,
    document_id: str,
    indexes: Optional[Sequence[int]] = None,
) -> list[VerifiableSource]:
    """
    Verification inputs for a stored document's chunks.

    Args:
        indexes: Restrict to these chunk indexes (all chunks if None)

    Raises:
        DocumentNotFoundError: If the document is unknown
    """
    document = store.get_document(document_id)
    chunks = store.list_chunks(document_id)
    if indexes is not None:
        wanted = set(indexes)
        chunks = [c for c in chunks if c.index in wanted]
    return [source_from_chunk(c, document) for c in chunks]


__all__ = [
    "DEFAULT_ANCHOR_TIMEOUT_S",
    "DEFAULT_MAX_WORKERS",
    "SealedChunkVerifier",
    "check_local",
    "source_from_chunk",
    "sources_for_document",
]
