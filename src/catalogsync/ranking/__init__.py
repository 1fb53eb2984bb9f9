from .component import PopularityTracker

__all__ = ["PopularityTracker"]
