"""User-based collaborative filtering over explicit ratings.

Core idea:
- Load (userId, itemId, rating) records into an in-memory `RatingStore`
- Score user pairs with Pearson's correlation over their co-rated items
- Treat users above a similarity threshold as the target's neighborhood
- Predict unrated items as the similarity-weighted average of neighbor ratings
- Score the whole pipeline by MAE on a random hold-out split
"""
from .data import Rating, RatingStore, load_ratings
from .errors import InsufficientDataError, MalformedRecordError, UnknownUserError, UserCFError
from .evaluation import AverageAbsoluteDifferenceEvaluator, EvaluationResult, evaluate
from .neighborhood import NearestNUserNeighborhood, ThresholdUserNeighborhood, threshold_neighbors
from .recommender import RecommendedItem, SimilarUser, UserBasedRecommender, build_recommender
from .similarity import PearsonCorrelationSimilarity, pearson_correlation

__all__ = [
    "AverageAbsoluteDifferenceEvaluator",
    "EvaluationResult",
    "InsufficientDataError",
    "MalformedRecordError",
    "NearestNUserNeighborhood",
    "PearsonCorrelationSimilarity",
    "Rating",
    "RatingStore",
    "RecommendedItem",
    "SimilarUser",
    "ThresholdUserNeighborhood",
    "UnknownUserError",
    "UserBasedRecommender",
    "UserCFError",
    "build_recommender",
    "evaluate",
    "load_ratings",
    "pearson_correlation",
    "threshold_neighbors",
]
