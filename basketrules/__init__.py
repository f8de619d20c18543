from .apriori import Apriori, apriori
from .association_rules import association_rules
from .eclat import Eclat, eclat
from .exceptions import (
    InternalConsistencyError,
    InvalidInputError,
    InvalidParameterError,
    MiningError,
    MiningTimeoutError,
)
from .mine import mine
from .model import Miner
from .params import MiningParameters
from .results import Itemset, ItemsetCollection, Rule, RuleCollection
from .transactions import TransactionStore, TransactionSummary, from_transactions

__version__ = "0.1.0"

__all__ = [
    "apriori",
    "Apriori",
    "eclat",
    "Eclat",
    "mine",
    "Miner",
    "association_rules",
    "from_transactions",
    "TransactionStore",
    "TransactionSummary",
    "MiningParameters",
    "Itemset",
    "ItemsetCollection",
    "Rule",
    "RuleCollection",
    "MiningError",
    "InvalidInputError",
    "InvalidParameterError",
    "InternalConsistencyError",
    "MiningTimeoutError",
]
