"""
Task Classifier - Keyword scoring of task complexity and domain.

Complexity is the weighted count of five keyword families. Domain is the
keyword list with the most hits. Both are best-effort: any text, including
an empty string, classifies to some profile.
"""

import logging
import re

from ..models import (
	ComplexityLevel,
	ComplexityProfile,
	DomainProfile,
	Priority,
	ResourceEstimate,
	RiskFactor,
	Task,
	WorkerRecommendation,
)

logger = logging.getLogger(__name__)

# family -> (weight, keywords)
COMPLEXITY_FAMILIES: dict[str, tuple[float, list[str]]] = {
	"technical_depth": (2.0, [
		"架构", "architecture", "微服务", "microservices", "分布式", "distributed",
		"api", "数据库", "database",
	]),
	"scope_size": (1.5, [
		"系统", "system", "平台", "platform", "完整", "complete", "端到端", "end-to-end",
	]),
	"integration_complexity": (2.0, [
		"集成", "integration", "对接", "interface", "第三方", "third-party",
	]),
	"time_sensitivity": (1.0, [
		"紧急", "urgent", "立即", "immediately", "快速", "quick",
	]),
	"documentation_need": (1.0, [
		"文档", "documentation", "手册", "manual", "说明", "guide",
	]),
}

# Declaration order breaks score ties
DOMAIN_KEYWORDS: dict[str, list[str]] = {
	"web-development": ["web", "网站", "frontend", "backend", "html", "css", "javascript"],
	"mobile-development": ["mobile", "app", "ios", "android", "移动", "手机"],
	"data-science": ["数据", "data", "机器学习", "ml", "ai", "人工智能", "分析"],
	"devops": ["部署", "deploy", "ci/cd", "docker", "kubernetes", "运维"],
	"backend-services": ["服务器", "server", "api", "database", "后端", "microservice"],
	"system-integration": ["集成", "integration", "对接", "interface", "系统"],
	"business-logic": ["业务", "business", "流程", "process", "规则", "logic"],
}

GENERAL_DOMAIN = "general"

SIMPLE_THRESHOLD = 4.0
COMPLEX_THRESHOLD = 8.0

BASE_HOURS = {
	ComplexityLevel.SIMPLE: 4,
	ComplexityLevel.MEDIUM: 12,
	ComplexityLevel.COMPLEX: 24,
}

_PATTERN_CACHE: dict[str, re.Pattern] = {}


def count_keyword(text: str, keyword: str) -> int:
	"""Occurrences of `keyword` in `text` that start on a word boundary."""
	pattern = _PATTERN_CACHE.get(keyword)
	if pattern is None:
		pattern = re.compile(r"(?<![a-z0-9])" + re.escape(keyword))
		_PATTERN_CACHE[keyword] = pattern
	return len(pattern.findall(text))


def level_for_score(score: float) -> ComplexityLevel:
	if score < SIMPLE_THRESHOLD:
		return ComplexityLevel.SIMPLE
	if score < COMPLEX_THRESHOLD:
		return ComplexityLevel.MEDIUM
	return ComplexityLevel.COMPLEX


def apply_hint(score: float, hint: ComplexityLevel) -> ComplexityLevel:
	"""Reinterpret the score toward a hint, allowing one step of disagreement."""
	if hint == ComplexityLevel.SIMPLE:
		return ComplexityLevel.SIMPLE if score < COMPLEX_THRESHOLD else ComplexityLevel.MEDIUM
	if hint == ComplexityLevel.COMPLEX:
		return ComplexityLevel.COMPLEX if score > SIMPLE_THRESHOLD - 1 else ComplexityLevel.MEDIUM
	return ComplexityLevel.MEDIUM


def _reasoning(factors: dict[str, float], level: ComplexityLevel) -> str:
	reasons = []
	if factors["technical_depth"] > 2:
		reasons.append("high technical depth")
	if factors["scope_size"] > 2:
		reasons.append("large scope")
	if factors["integration_complexity"] > 2:
		reasons.append("complex integration")
	if factors["time_sensitivity"] > 0:
		reasons.append("time pressure")
	if reasons:
		return f"Classified as {level.value}: {', '.join(reasons)}"
	return f"Classified as {level.value}"


class TaskClassifier:
	"""Scores a task's complexity and domain from its text."""

	def classify_complexity(self, task: Task) -> ComplexityProfile:
		text = task.content.lower()

		factors: dict[str, float] = {}
		for family, (weight, keywords) in COMPLEXITY_FAMILIES.items():
			hits = sum(count_keyword(text, k) for k in keywords)
			factors[family] = hits * weight

		score = sum(factors.values())
		raw_level = level_for_score(score)
		level = raw_level
		confidence = 0.8

		hint = _parse_complexity_hint(task.complexity_hint)
		if hint is not None:
			level = apply_hint(score, hint)
			confidence = 0.9 if level == raw_level else 0.7

		return ComplexityProfile(
			level=level,
			score=score,
			factors=factors,
			confidence=confidence,
			reasoning=_reasoning(factors, level),
		)

	def classify_domain(self, task: Task) -> DomainProfile:
		text = task.content.lower()

		scores = {
			domain: sum(count_keyword(text, k) for k in keywords)
			for domain, keywords in DOMAIN_KEYWORDS.items()
		}
		# sorted() is stable, so equal scores keep declaration order
		ranked = [d for d in sorted(scores, key=lambda d: scores[d], reverse=True) if scores[d] > 0]

		primary = ranked[0] if ranked else GENERAL_DOMAIN
		secondary = ranked[1] if len(ranked) > 1 else None
		top_score = scores[ranked[0]] if ranked else 0

		hint = task.domain_hint
		if hint and scores.get(hint, 0) > 0 and hint != primary:
			if secondary == hint:
				secondary = primary
			primary = hint

		return DomainProfile(
			primary=primary,
			secondary=secondary,
			scores=scores,
			confidence=0.9 if top_score > 2 else 0.7,
		)

	def classify(self, task: Task) -> tuple[ComplexityProfile, DomainProfile]:
		complexity = self.classify_complexity(task)
		domain = self.classify_domain(task)
		logger.debug(
			f"Classified task as {complexity.level.value} "
			f"(score={complexity.score}), domain={domain.primary}"
		)
		return complexity, domain


def _parse_complexity_hint(hint: str | None) -> ComplexityLevel | None:
	if not hint:
		return None
	try:
		return ComplexityLevel(hint.strip().lower())
	except ValueError:
		logger.warning(f"Ignoring unknown complexity hint: {hint!r}")
		return None


def estimate_resources(
	complexity: ComplexityProfile,
	recommendations: list[WorkerRecommendation],
) -> ResourceEstimate:
	"""Rough effort estimate: base hours per level, discounted for larger teams."""
	count = len(recommendations)
	multiplier = max(0.5, 1 - (count - 2) * 0.1)
	return ResourceEstimate(
		duration_hours=round(BASE_HOURS[complexity.level] * multiplier),
		worker_count=count,
		parallel_execution=count > 2,
		critical_path=[r.worker.name for r in recommendations if r.priority == Priority.HIGH],
		resource_intensity=complexity.level,
	)


def assess_risks(complexity: ComplexityProfile) -> list[RiskFactor]:
	risks: list[RiskFactor] = []

	if complexity.level == ComplexityLevel.COMPLEX:
		risks.append(RiskFactor(
			type="scope_creep",
			level="medium",
			description="Complex tasks are prone to scope creep",
			mitigation="Pin down requirement boundaries and deliver in phases",
		))

	if complexity.factors.get("integration_complexity", 0) > 2:
		risks.append(RiskFactor(
			type="integration_risk",
			level="high",
			description="Integrating several systems carries technical risk",
			mitigation="Validate the integration points early with a prototype",
		))

	if complexity.factors.get("time_sensitivity", 0) > 0:
		risks.append(RiskFactor(
			type="time_pressure",
			level="medium",
			description="Time pressure may affect quality",
			mitigation="Allocate resources to core features first",
		))

	return risks
