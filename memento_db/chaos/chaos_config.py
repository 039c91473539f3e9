import random
import time
from collections import defaultdict
from typing import Optional
from .exceptions.chaos_exception import ChaosException


class ChaosConfig:

    """
    Fault-injection settings for store operations, plus the metrics
    collected while injecting.

    Args:
        enabled (bool): Whether chaos is injected at all. Defaults to False.
        failure_rate (float): Probability an operation raises ChaosException.
        delay_chance (float): Probability an operation is delayed.
        max_delay (float): Upper bound of an injected delay, in seconds.
        seed (int, optional): Seed for a private random generator, for
            reproducible runs.
    """
    def __init__(
            self,
            enabled: bool = False,
            failure_rate: float = 0.1,
            delay_chance: float = 0.2,
            max_delay: float = 2.0,
            seed: Optional[int] = None,
    ):
        for name, rate in (("failure_rate", failure_rate), ("delay_chance", delay_chance)):
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {rate}")
        if max_delay < 0:
            raise ValueError(f"max_delay must not be negative, got {max_delay}")

        self.enabled = enabled
        self.failure_rate = failure_rate
        self.delay_chance = delay_chance
        self.max_delay = max_delay
        self.random = random.Random(seed)

        self.total_operations = 0
        self.failures_injected = 0
        self.delays_injected = 0
        self.total_delay_time = 0.0
        self.failures_by_context = defaultdict(int)
        self.delays_by_context = defaultdict(int)

    def maybe_fail(self, context):
        """Raise ChaosException with probability ``failure_rate``."""
        self.total_operations += 1
        if self.enabled and self.random.random() < self.failure_rate:
            self.failures_injected += 1
            self.failures_by_context[context] += 1
            print(f"[CHAOS] Injected failure in {context}")
            raise ChaosException(f"Chaos failure occurred during {context}.")

    def maybe_delay(self, context):
        if self.enabled and self.random.random() < self.delay_chance:
            delay = self.random.uniform(0, self.max_delay)
            self.delays_injected += 1
            self.delays_by_context[context] += 1
            self.total_delay_time += delay
            print(f"[CHAOS] Injected delay of {delay:.2f} seconds in {context}")
            time.sleep(delay)

    def get_metrics(self):
        return {
            "Summary": {
                "total_operations": self.total_operations,
                "failures_injected": self.failures_injected,
                "delays_injected": self.delays_injected,
                "total_delay_time": round(self.total_delay_time, 2),
            },
            "Failures by Context": dict(self.failures_by_context),
            "Delays by Context": dict(self.delays_by_context),
        }

    def print_metrics(self):
        metrics = self.get_metrics()

        print("\n=== Chaos Metrics Summary ===")
        for key, value in metrics["Summary"].items():
            print(f"{key.replace('_', ' ').capitalize()}: {value}")

        for section in ("Failures by Context", "Delays by Context"):
            print(f"\n--- {section} ---")
            if not metrics[section]:
                print(f"No {section.split()[0].lower()} recorded.")
            for context, count in metrics[section].items():
                print(f"{context}: {count}")
        print("===========================\n")
