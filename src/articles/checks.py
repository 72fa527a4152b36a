"""System checks for the provider category table."""

from django.core.checks import Error, register

from .ingestion import unmapped_categories


@register()
def categories_have_provider_mapping(app_configs, **kwargs):
    """Every article category must map onto the news provider's vocabulary."""
    return [
        Error(
            f"Category {category!r} has no entry in PROVIDER_CATEGORY_MAP.",
            hint="Add the provider category to articles.ingestion.PROVIDER_CATEGORY_MAP.",
            id="articles.E001",
        )
        for category in unmapped_categories()
    ]
