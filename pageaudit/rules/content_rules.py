"""
Content rule set for PageAudit
Declarative thresholds over content detector and heuristic metrics
"""

from typing import List

from pageaudit.core.rules_engine import RuleCategory, build_category

CATEGORY_SPECS = {
    "structure_rules": [
        {"name": "single_h1", "metric": "content_structure.h1_count", "op": "==", "threshold": 1,
         "weight": 1.0, "impact": "high", "description": "Page has exactly one H1 heading"},
        {"name": "heading_hierarchy", "metric": "content_structure.skipped_heading_levels", "op": "==",
         "threshold": 0, "weight": 0.6, "impact": "medium", "description": "Heading levels are not skipped"},
        {"name": "semantic_landmarks", "metric": "content_structure.semantic_elements", "op": ">=",
         "threshold": 2, "weight": 0.6, "impact": "medium", "description": "Semantic landmarks structure the page"},
        {"name": "main_landmark", "metric": "content_structure.has_main", "op": "==", "threshold": True,
         "weight": 0.4, "impact": "low", "description": "Page declares a <main> element"},
    ],
    "quality_rules": [
        {"name": "minimum_word_count", "metric": "content_quality.word_count", "op": ">=", "threshold": 300,
         "weight": 1.0, "impact": "high", "description": "Page has at least 300 words of content"},
        {"name": "lexical_variety", "metric": "content_quality.unique_word_ratio", "op": ">=", "threshold": 0.3,
         "weight": 0.5, "impact": "medium", "description": "Vocabulary is varied"},
        {"name": "no_duplicate_paragraphs", "metric": "content_quality.duplicate_paragraphs", "op": "==",
         "threshold": 0, "weight": 0.5, "impact": "medium", "description": "No duplicated paragraphs"},
        {"name": "text_to_html_ratio", "metric": "content_quality.text_to_html_ratio", "op": ">=",
         "threshold": 0.1, "weight": 0.4, "impact": "low", "description": "Markup does not dwarf the text"},
    ],
    "readability_rules": [
        {"name": "reading_ease", "metric": "readability.flesch_reading_ease", "op": ">=", "threshold": 50,
         "weight": 1.0, "impact": "medium", "description": "Flesch reading ease of at least 50"},
        {"name": "grade_level", "metric": "readability.flesch_kincaid_grade", "op": "<=", "threshold": 12,
         "weight": 0.6, "impact": "medium", "description": "Readable at high-school level"},
        {"name": "sentence_length", "metric": "readability.avg_words_per_sentence", "op": "<=", "threshold": 20,
         "weight": 0.6, "impact": "low", "description": "Average sentence has at most 20 words"},
    ],
    "seo_rules": [
        {"name": "title_present", "metric": "seo_content.title_length", "op": ">", "threshold": 0,
         "weight": 1.0, "impact": "high", "description": "Page has a title"},
        {"name": "meta_description_present", "metric": "seo_content.meta_description_length", "op": ">",
         "threshold": 0, "weight": 0.8, "impact": "high", "description": "Page has a meta description"},
        {"name": "canonical_link", "metric": "seo_content.has_canonical", "op": "==", "threshold": True,
         "weight": 0.4, "impact": "low", "description": "Page declares a canonical URL"},
        {"name": "document_language", "metric": "seo_content.has_lang", "op": "==", "threshold": True,
         "weight": 0.4, "impact": "low", "description": "Document language is declared"},
        {"name": "internal_linking", "metric": "seo_content.internal_links", "op": ">=", "threshold": 3,
         "weight": 0.5, "impact": "medium", "description": "At least three internal links"},
    ],
    "multimedia_rules": [
        {"name": "image_alt_text", "metric": "multimedia.images_missing_alt", "op": "==", "threshold": 0,
         "weight": 1.0, "impact": "high", "description": "Every image has alt text"},
        {"name": "visual_content", "metric": "multimedia.image_count", "op": ">=", "threshold": 1,
         "weight": 0.5, "impact": "low", "description": "Content includes at least one image"},
    ],
    "engagement_rules": [
        {"name": "call_to_action", "metric": "engagement.cta_count", "op": ">=", "threshold": 1,
         "weight": 1.0, "impact": "medium", "description": "Page offers a call to action"},
        {"name": "interactive_elements", "metric": "engagement.interactive_elements", "op": ">=", "threshold": 1,
         "weight": 0.4, "impact": "low", "description": "Page has interactive elements"},
    ],
}

CATEGORY_WEIGHTS = {
    "structure_rules": 0.2,
    "quality_rules": 0.25,
    "readability_rules": 0.15,
    "seo_rules": 0.2,
    "multimedia_rules": 0.1,
    "engagement_rules": 0.1,
}

EFFORT_TABLE = {
    "single_h1": "low",
    "heading_hierarchy": "low",
    "main_landmark": "low",
    "title_present": "low",
    "meta_description_present": "low",
    "canonical_link": "low",
    "document_language": "low",
    "image_alt_text": "low",
    "minimum_word_count": "high",
    "lexical_variety": "high",
    "reading_ease": "high",
    "grade_level": "high",
}

SCORE_GAIN_TABLE = {
    "minimum_word_count": 8.0,
    "single_h1": 5.0,
    "title_present": 5.0,
}


def build_categories() -> List[RuleCategory]:
    return [build_category(name, specs) for name, specs in CATEGORY_SPECS.items()]
