from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Optional

import chex
import jax
import jax.numpy as jnp

from cubesolve.core.puzzle_state import FieldDescriptor, PuzzleState, state_dataclass


class Puzzle(ABC):
    """Abstract base class for cube puzzle environments.

    Every concrete puzzle subclass must:

    1. Set ``action_size`` (number of generator actions).
    2. Implement :meth:`define_state_class` to return a ``@state_dataclass``-decorated class.
    3. Implement :meth:`get_actions`, :meth:`is_solved`, :meth:`get_solve_config`,
       :meth:`get_initial_state` and :meth:`get_string_parser`.

    The base class JIT-compiles the transition functions once per instance and
    provides the batched and inverse-neighbour variants on top of them.

    Attributes:
        action_size: Number of discrete actions available in this puzzle.
        State: The ``@state_dataclass`` class representing states (set during ``__init__``).
        SolveConfig: The ``@state_dataclass`` class representing goal configurations
            (set during ``__init__``).
    """

    action_size: int = None

    @property
    def inverse_action_map(self) -> Optional[jnp.ndarray]:
        """
        Array mapping each action to its inverse, or None if the puzzle is not reversible.

        ``map[i]`` is the action that undoes action ``i``. The default
        :meth:`get_inverse_neighbours` and the no-backtracking scramble rely on it.
        """
        return None

    @property
    def is_reversible(self) -> bool:
        return self.inverse_action_map is not None

    class State(PuzzleState):
        pass

    class SolveConfig(PuzzleState):
        pass

    def define_solve_config_class(self) -> PuzzleState:
        """Return the ``@state_dataclass`` class used for the goal configuration.

        The default goal is a single ``TargetState``.
        """

        @state_dataclass
        class SolveConfig:
            TargetState: FieldDescriptor.scalar(dtype=self.State)

            def __str__(self, **kwargs):
                return self.TargetState.str(**kwargs)

        return SolveConfig

    @abstractmethod
    def define_state_class(self) -> PuzzleState:
        """Return the ``@state_dataclass`` class used for puzzle states."""
        pass

    def __init__(self, **kwargs):
        """Initialise the puzzle.

        Subclass constructors **must** call ``super().__init__(**kwargs)`` after
        setting ``action_size`` and any attribute :meth:`define_state_class` needs.

        Raises:
            ValueError: If ``action_size`` is still ``None`` after subclass init.
        """
        super().__init__()

        self.State = self.define_state_class()
        self.SolveConfig = self.define_solve_config_class()

        self.get_initial_state = jax.jit(self.get_initial_state)
        self.get_solve_config = jax.jit(self.get_solve_config)
        self.get_actions = jax.jit(self.get_actions)
        self.get_neighbours = jax.jit(self.get_neighbours)
        self.batched_get_neighbours = jax.jit(self.batched_get_neighbours)
        self.is_solved = jax.jit(self.is_solved)
        self.batched_is_solved = jax.jit(self.batched_is_solved)

        if self.action_size is None:
            raise ValueError(
                f"{self.__class__.__name__} must define `action_size` before calling Puzzle.__init__"
            )

        # i-th inverse neighbour is neighbours[_inverse_action_permutation[i]]
        self._inverse_action_permutation = self.inverse_action_map

    @abstractmethod
    def get_string_parser(self) -> Callable:
        """Return a callable ``(state, **kwargs) -> str`` rendering a state for the terminal."""
        pass

    @abstractmethod
    def get_solve_config(self, key=None, data=None) -> SolveConfig:
        """Build and return the goal configuration."""
        pass

    @abstractmethod
    def get_initial_state(self, solve_config: SolveConfig, key=None, data=None) -> State:
        """Build and return a scrambled starting state for ``solve_config``."""
        pass

    def get_inits(self, key=None) -> tuple[SolveConfig, State]:
        """Convenience method returning ``(solve_config, initial_state)``."""
        solveconfigkey, initkey = jax.random.split(key, 2)
        solve_config = self.get_solve_config(solveconfigkey)
        return solve_config, self.get_initial_state(solve_config, initkey)

    @abstractmethod
    def get_actions(
        self,
        solve_config: SolveConfig,
        state: State,
        action: chex.Array,
        filled: bool = True,
    ) -> tuple[State, chex.Array]:
        """Apply a single action to a state.

        Returns:
            ``(next_state, cost)``; ``cost`` is ``jnp.inf`` and the state is unchanged
            when ``filled`` is false.
        """
        pass

    def get_neighbours(
        self, solve_config: SolveConfig, state: State, filled: bool = True
    ) -> tuple[State, chex.Array]:
        """Successor states for every action, stacked along a leading ``action_size`` axis."""
        actions = jnp.arange(self.action_size)
        states, costs = jax.vmap(
            self.get_actions, in_axes=(None, None, 0, None), out_axes=(0, 0)
        )(solve_config, state, actions, filled)
        return states, costs

    def batched_get_neighbours(
        self, solve_config: SolveConfig, states: State, filleds: bool = True
    ) -> tuple[State, chex.Array]:
        """Vectorised :meth:`get_neighbours`; outputs are ``(action_size, batch, ...)``."""
        return jax.vmap(self.get_neighbours, in_axes=(None, 0, None), out_axes=(1, 1))(
            solve_config, states, filleds
        )

    @abstractmethod
    def is_solved(self, solve_config: SolveConfig, state: State) -> bool:
        pass

    def batched_is_solved(self, solve_config: SolveConfig, states: State) -> chex.Array:
        return jax.vmap(self.is_solved, in_axes=(None, 0))(solve_config, states)

    def action_to_string(self, action: int) -> str:
        return f"action {action}"

    def get_inverse_neighbours(
        self, solve_config: SolveConfig, state: State, filled: bool = True
    ) -> tuple[State, chex.Array]:
        """
        Predecessor states: the i-th entry is the state from which action i leads to
        ``state``. Only available for puzzles with an ``inverse_action_map``.
        """
        if self._inverse_action_permutation is None:
            raise NotImplementedError(
                "This puzzle does not define an `inverse_action_map`; "
                "override `get_inverse_neighbours` for a non-reversible puzzle."
            )

        neighbours, costs = self.get_neighbours(solve_config, state, filled)
        permuted_neighbours = neighbours[self._inverse_action_permutation]
        permuted_costs = costs[self._inverse_action_permutation]
        return permuted_neighbours, permuted_costs

    def sample_scramble_actions(self, key, num_moves: int) -> chex.Array:
        """``num_moves`` random actions where no action undoes the one before it."""
        if not self.is_reversible:
            raise NotImplementedError("Scrambling requires an `inverse_action_map`")

        action_size = self.action_size
        inv_map = self._inverse_action_permutation

        def step(previous_action, subkey):
            mask = jnp.ones(action_size, dtype=jnp.float32)
            valid_mask = jax.lax.cond(
                previous_action >= 0,
                lambda: mask.at[inv_map[previous_action]].set(0.0),
                lambda: mask,
            )
            action = jax.random.choice(subkey, action_size, p=valid_mask / valid_mask.sum())
            action = action.astype(jnp.int32)
            return action, action

        _, actions = jax.lax.scan(step, jnp.int32(-1), jax.random.split(key, num_moves))
        return actions

    def _get_shuffled_state(
        self,
        solve_config: "Puzzle.SolveConfig",
        init_state: "Puzzle.State",
        key,
        num_shuffle: int,
    ):
        """Scramble ``init_state`` with ``num_shuffle`` (+0 or 1) random actions."""
        key, subkey = jax.random.split(key)
        # Vary parity of the scramble length.
        num_moves = num_shuffle + jax.random.randint(subkey, (), 0, 2)
        actions = self.sample_scramble_actions(key, num_shuffle + 1)

        def body_fun(i, current_state):
            next_state, _ = self.get_actions(solve_config, current_state, actions[i], filled=True)
            return next_state

        return jax.lax.fori_loop(0, num_moves, body_fun, init_state)

    def __repr__(self):
        state_fields = list(self.State.__annotations__.keys())
        return (
            f"Puzzle({self.__class__.__name__}, "
            f"action_size={self.action_size}, "
            f"state_fields={state_fields})"
        )
