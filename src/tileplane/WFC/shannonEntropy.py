import jax
import jax.numpy as jnp


@jax.jit
def weighted_shannon_entropy(candidates: jnp.ndarray, weights: jnp.ndarray) -> jnp.ndarray:
    """
    weighted shannon entropy (nats) of every cell's candidate set
    :param candidates: (n_cells, n_types) bool mask of still possible types
    :param weights: (n_types,) positive occurrence count of each type
    :return: (n_cells,) ln(sum w) - sum(w * ln w) / sum w over the candidates
    """
    w = jnp.asarray(weights, dtype=jnp.float32)
    masked = jnp.where(candidates, w, 0.0)
    total = jnp.sum(masked, axis=-1)
    total_log = jnp.sum(masked * jnp.log(w), axis=-1)
    safe_total = jnp.where(total == 0, 1.0, total)
    return jnp.log(safe_total) - total_log / safe_total


if __name__ == "__main__":
    # a single candidate carries no uncertainty
    print(weighted_shannon_entropy(jnp.array([[True, False]]), jnp.array([3, 7])))
    # two equally weighted candidates: ln 2
    print(weighted_shannon_entropy(jnp.array([[True, True]]), jnp.array([4, 4])), jnp.log(2.0))
