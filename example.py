import logging
import math

import msgspec

from mapflow import Named, create, make_safe, partition
from mapflow.builtins import seed

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)
    seed(7)
    client = create()

    # One bad element no longer aborts the batch
    inputs = [1, 10, "a"]
    results = client.map(inputs, make_safe(math.log))
    split = partition(results, inputs)
    print(msgspec.json.format(msgspec.json.encode(split), indent=2).decode())

    draws = client.invoke_map(
        ["uniform_random", "normal_random", "poisson_random"],
        [{"min": -1, "max": 1}, {"sd": 5}, {"lambda": 10}],
        shared={"n": 5},
    )
    print(msgspec.json.encode(draws).decode())

    samples = client.pmap({"n": [1, 2, 3], "mean": [0, 10, 100], "sd": [1, 5, 20]}, Named(name="normal_random"))
    print(client.map_int(samples, len).to_list())
