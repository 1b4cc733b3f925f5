"""Processing orchestrator for the end-to-end analysis workflow."""
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from finn.analysis import AnalysisResult, ExpenseAnalyzer, parse_transactions
from finn.config import AppSettings, Config
from finn.llm import LLMCategorizer, Ok, VendorCache
from finn.profiles import ProfileStore, build_memory_profile
from finn.utils.exceptions import ValidationError
from finn.utils.logger import get_logger, set_profile_context

logger = get_logger()


@dataclass
class ProcessingResult:
    """Result of processing one upload."""
    profile_id: str
    result: AnalysisResult
    used_llm: bool
    transactions_parsed: int
    duration_seconds: float = 0.0


class AnalysisOrchestrator:
    """Orchestrates parsing, analysis, LLM refinement and profile storage."""

    def __init__(self, config: Config, settings: AppSettings, store: ProfileStore,
                 llm: Optional[LLMCategorizer] = None):
        """
        Initialize orchestrator.

        Args:
            config: User configuration
            settings: Application settings
            store: Profile store receiving the memory profile
            llm: LLM categorizer; built from the Gemini key on first use when omitted
        """
        self.config = config
        self.settings = settings
        self.store = store
        self._llm = llm

        self.analyzer = ExpenseAnalyzer(
            max_workers=settings.analysis_max_workers,
            top_merchant_limit=settings.top_merchants
        )

        logger.info(f"Analysis orchestrator initialized (LLM {'on' if self.llm_enabled else 'off'})")

    @property
    def llm_enabled(self) -> bool:
        if not (self.settings.use_llm and self.config.use_llm):
            return False
        return self._llm is not None or bool(self.config.gemini_api_key)

    @property
    def llm(self) -> LLMCategorizer:
        if self._llm is None:
            # google-genai is only imported once the LLM is actually used
            from finn.llm.client import GeminiClient

            client = GeminiClient(
                self.config.gemini_api_key,
                model_name=self.settings.llm_model_name,
                max_retries=self.settings.llm_max_retries,
                backoff_factor=self.settings.llm_backoff_factor
            )
            vendor_cache = VendorCache(
                self.settings.vendors_dir,
                fuzzy_threshold=self.settings.vendor_cache_fuzzy_threshold
            )
            self._llm = LLMCategorizer(client, vendor_cache, json_mode=self.settings.llm_json_mode)
        return self._llm

    def process_file(self, path: Path, profile_id: str) -> ProcessingResult:
        """
        Analyze an uploaded expense file.

        Args:
            path: Text or CSV file with one transaction per line
            profile_id: Profile the result is stored under

        Returns:
            ProcessingResult

        Raises:
            ValidationError: If the file cannot be read
            NoValidTransactionsError: If no line yields a transaction
        """
        path = Path(path)
        logger.info(f"Processing file: {path.name}")

        try:
            text = path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ValidationError(f"Cannot read {path}: {e}")

        return self.process_text(text, profile_id)

    def process_text(self, text: str, profile_id: str) -> ProcessingResult:
        """
        Analyze raw expense text.

        Args:
            text: Transaction lines
            profile_id: Profile the result is stored under

        Returns:
            ProcessingResult
        """
        set_profile_context(profile_id)
        start_time = time.time()

        try:
            transactions = parse_transactions(text)
            parsed_count = len(transactions)
            used_llm = False

            if self.llm_enabled:
                categorized = self.llm.categorize(transactions, profile_id)
                if isinstance(categorized, Ok):
                    transactions = categorized.value
                    used_llm = True
                else:
                    logger.warning(f"Using keyword categories: {categorized.reason}")

            result = self.analyzer.analyze(transactions)

            if self.llm_enabled:
                assessed = self.llm.assess_insights(result.metadata, result.transactions)
                if isinstance(assessed, Ok):
                    result = self.analyzer.refine(result, assessed.value)
                    used_llm = True
                else:
                    logger.warning(f"Using heuristic insights: {assessed.reason}")

            existing = self.store.get(profile_id)
            profile = build_memory_profile(result, profile_id, existing, now=datetime.now())
            self.store.put(profile_id, profile)

            duration = time.time() - start_time
            logger.info(
                f"Profile {profile_id} updated: {parsed_count} transactions, "
                f"LLM {'used' if used_llm else 'not used'}, {duration:.1f}s"
            )

            return ProcessingResult(
                profile_id=profile_id,
                result=result,
                used_llm=used_llm,
                transactions_parsed=parsed_count,
                duration_seconds=duration
            )
        finally:
            set_profile_context(None)
