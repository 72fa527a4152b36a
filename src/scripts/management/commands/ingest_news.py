"""Run the news ingestion pipeline from the command line."""

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from articles.ingestion import ingest_news


class Command(BaseCommand):
    help = "Fetch top headlines for every category and insert the unseen ones."

    def handle(self, *args, **options):
        try:
            result = ingest_news()
        except ImproperlyConfigured as exc:
            raise CommandError(str(exc)) from exc
        self.stdout.write(
            self.style.SUCCESS(
                f"Fetched {result.total_fetched} articles, inserted {result.total_inserted}."
            )
        )
