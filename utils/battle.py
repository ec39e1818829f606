"""
Turn-based battle engine.

A BattleSession is a finite-state machine driven by discrete events. The
BattleEngine feeds it events: it asks an action policy for the player's
move, resolves it with the combat math or the skill handler, rolls the
enemy's reply and closes out each round. Policies decide how the player's
action is picked (interactive buttons, always attack, or random skills).
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from config import (
    MANUAL_MAX_ROUNDS, HYBRID_MAX_ROUNDS, QUICK_MAX_ROUNDS,
    MAX_CONSECUTIVE_TIMEOUTS, HYBRID_SKILL_CHANCE,
)
from utils.combat import EnemyCombatant, PlayerCombatant, compute_attack
from utils.enemies import EnemyArchetype, select_enemy
from utils.errors import (
    BattleInterrupted, InvalidTransition, PresentationFailure, SkillFailure, StorageFailure,
)
from utils.rewards import defeat_rewards, round_cap_rewards, victory_rewards

logger = logging.getLogger(__name__)


class BattleState(Enum):
    INIT = "init"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    ROUND_END = "round_end"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"
    TIMED_OUT = "timed_out"
    ROUND_CAP_REACHED = "round_cap_reached"


TERMINAL_STATES = frozenset({
    BattleState.VICTORY,
    BattleState.DEFEAT,
    BattleState.FLED,
    BattleState.TIMED_OUT,
    BattleState.ROUND_CAP_REACHED,
})


class BattleEvent(Enum):
    STARTED = "started"
    PLAYER_ACTED = "player_acted"
    PLAYER_FLED = "player_fled"
    TIMED_OUT = "timed_out"
    ENEMY_ACTED = "enemy_acted"
    ROUND_CAP_HIT = "round_cap_hit"
    NEXT_ROUND = "next_round"


class BattleMode(Enum):
    MANUAL = "manual"
    QUICK = "quick"
    HYBRID = "hybrid"

    @classmethod
    def parse(cls, value) -> "BattleMode":
        """Read a mode name, falling back to manual for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.MANUAL


MODE_ROUND_CAPS = {
    BattleMode.MANUAL: MANUAL_MAX_ROUNDS,
    BattleMode.QUICK: QUICK_MAX_ROUNDS,
    BattleMode.HYBRID: HYBRID_MAX_ROUNDS,
}

MODE_INTROS = {
    BattleMode.MANUAL: "⚔️ Manual battle",
    BattleMode.QUICK: "💨 Quick battle",
    BattleMode.HYBRID: "⚡ Hybrid battle",
}


class ActionKind(Enum):
    ATTACK = "attack"
    SKILL = "skill"
    FLEE = "flee"


@dataclass(frozen=True)
class PlayerAction:
    kind: ActionKind
    skill_id: Optional[int] = None


ATTACK = PlayerAction(ActionKind.ATTACK)
FLEE = PlayerAction(ActionKind.FLEE)


def use_skill_action(skill_id) -> PlayerAction:
    return PlayerAction(ActionKind.SKILL, skill_id)


def affordable(skills: Sequence, mana: int) -> list:
    return [skill for skill in skills if skill.mana_cost <= mana]


@dataclass
class BattleOutcome:
    state: BattleState
    mode: BattleMode
    enemy: EnemyArchetype
    battle_log: List[str]
    final_player_hp: int
    final_enemy_hp: int
    max_player_hp: int
    xp_earned: int
    gold_earned: int
    rounds_fought: int

    @property
    def victory(self) -> bool:
        return self.state is BattleState.VICTORY

    @property
    def defeat(self) -> bool:
        return self.state is BattleState.DEFEAT


class BattleSession:
    """State of one encounter. Never persisted."""

    def __init__(self, player: PlayerCombatant, enemy: EnemyCombatant,
                 mode: BattleMode = BattleMode.MANUAL, max_rounds: Optional[int] = None,
                 max_timeouts: int = MAX_CONSECUTIVE_TIMEOUTS):
        self.player = player
        self.enemy = enemy
        self.mode = mode
        self.max_rounds = MODE_ROUND_CAPS[mode] if max_rounds is None else max_rounds
        self.max_timeouts = max_timeouts
        self.round = 1
        self.state = BattleState.INIT
        self.log: List[str] = []
        self.consecutive_timeouts = 0

    @property
    def is_over(self) -> bool:
        return self.state in TERMINAL_STATES

    def transition(self, event: BattleEvent) -> BattleState:
        """
        Apply an event and return the new state.

        A timed-out player turn is forfeited: the enemy still takes its turn.
        Only after max_timeouts forfeits in a row does the battle end.

        Raises:
            InvalidTransition: If the event makes no sense in the current state
        """
        state = self.state
        new_state = None

        if state is BattleState.INIT and event is BattleEvent.STARTED:
            new_state = BattleState.PLAYER_TURN

        elif state is BattleState.PLAYER_TURN:
            if event is BattleEvent.PLAYER_ACTED:
                self.consecutive_timeouts = 0
                new_state = BattleState.VICTORY if self.enemy.health <= 0 else BattleState.ENEMY_TURN
            elif event is BattleEvent.PLAYER_FLED:
                new_state = BattleState.FLED
            elif event is BattleEvent.TIMED_OUT:
                self.consecutive_timeouts += 1
                if self.consecutive_timeouts >= self.max_timeouts:
                    new_state = BattleState.TIMED_OUT
                else:
                    new_state = BattleState.ENEMY_TURN

        elif state is BattleState.ENEMY_TURN and event is BattleEvent.ENEMY_ACTED:
            new_state = BattleState.DEFEAT if self.player.health <= 0 else BattleState.ROUND_END

        elif state is BattleState.ROUND_END:
            if event is BattleEvent.ROUND_CAP_HIT:
                new_state = BattleState.ROUND_CAP_REACHED
            elif event is BattleEvent.NEXT_ROUND and self.round < self.max_rounds:
                self.round += 1
                new_state = BattleState.PLAYER_TURN

        if new_state is None:
            raise InvalidTransition(f"{event.name} is not valid in state {state.name}")

        self.state = new_state
        return new_state

    def end_round(self) -> BattleState:
        if self.round >= self.max_rounds:
            return self.transition(BattleEvent.ROUND_CAP_HIT)
        return self.transition(BattleEvent.NEXT_ROUND)

    def rewards(self):
        """(xp, gold) earned for the current terminal state."""
        archetype = self.enemy.archetype
        if self.state is BattleState.VICTORY:
            return victory_rewards(archetype)
        if self.state is BattleState.DEFEAT:
            return defeat_rewards(archetype)
        if self.state is BattleState.ROUND_CAP_REACHED:
            return round_cap_rewards(archetype, self.round, self.max_rounds)
        return 0, 0

    def outcome(self) -> BattleOutcome:
        if not self.is_over:
            raise InvalidTransition(f"Battle is still in state {self.state.name}")

        xp, gold = self.rewards()
        return BattleOutcome(
            state=self.state,
            mode=self.mode,
            enemy=self.enemy.archetype,
            battle_log=list(self.log),
            final_player_hp=self.player.health,
            final_enemy_hp=self.enemy.health,
            max_player_hp=self.player.max_health,
            xp_earned=xp,
            gold_earned=gold,
            rounds_fought=self.round,
        )


class ActionPolicy:
    """Chooses the player's action each round. Returning None means the player timed out."""

    async def choose_action(self, session: BattleSession, skills: Sequence) -> Optional[PlayerAction]:
        raise NotImplementedError

    async def close(self, session: BattleSession):
        """Release any input resources once the battle is over."""


class QuickPolicy(ActionPolicy):
    async def choose_action(self, session, skills):
        return ATTACK


class HybridPolicy(ActionPolicy):
    """Each round, a chance to fire a random affordable skill instead of attacking."""

    def __init__(self, rng=random, skill_chance: float = HYBRID_SKILL_CHANCE):
        self.rng = rng
        self.skill_chance = skill_chance

    async def choose_action(self, session, skills):
        usable = affordable(skills, session.player.mana)
        if usable and self.rng.random() < self.skill_chance:
            return use_skill_action(self.rng.choice(usable).id)
        return ATTACK


class BattleEngine:
    """Runs battles between a character and an enemy."""

    def __init__(self, skill_handler, rng=random):
        self.skill_handler = skill_handler
        self.rng = rng

    def policy_for(self, mode: BattleMode, prompt: Optional[ActionPolicy] = None) -> ActionPolicy:
        if mode is BattleMode.MANUAL:
            if prompt is None:
                raise ValueError("Manual battles need an interactive prompt")
            return prompt
        if mode is BattleMode.HYBRID:
            return HybridPolicy(self.rng)
        return QuickPolicy()

    async def run_battle(self, character: dict, level_band, mode="manual",
                         prompt: Optional[ActionPolicy] = None) -> BattleOutcome:
        """Pick an enemy from the level band and fight it."""
        enemy = select_enemy(*level_band, rng=self.rng)
        return await self.fight(character, enemy, mode, prompt)

    async def fight(self, character: dict, enemy: EnemyArchetype, mode="manual",
                    prompt: Optional[ActionPolicy] = None) -> BattleOutcome:
        """
        Run a full encounter.

        Raises:
            BattleInterrupted: If storage or the battle message fails mid-battle.
                Carries the log so far.
        """
        mode = BattleMode.parse(mode)
        policy = self.policy_for(mode, prompt)

        session = BattleSession(
            PlayerCombatant.from_character(character),
            EnemyCombatant.from_archetype(enemy),
            mode,
        )
        session.log.append(f"{MODE_INTROS[mode]} against {enemy.name} (Level {enemy.level}) begins!")
        session.log.append(f"You have {session.player.health} HP | {enemy.name} has {enemy.health} HP")

        logger.info(f"Character {character['id']} started a {mode.value} battle against {enemy.name}")

        try:
            skills = await self.skill_handler.active_skills(character["id"])
            session.transition(BattleEvent.STARTED)

            while not session.is_over:
                if session.state is BattleState.PLAYER_TURN:
                    await self.player_turn(session, policy, skills)
                elif session.state is BattleState.ENEMY_TURN:
                    self.enemy_turn(session)
                else:
                    session.end_round()
        except (StorageFailure, PresentationFailure) as e:
            logger.error(f"Battle for character {character['id']} aborted: {e}")
            raise BattleInterrupted(session.log) from e
        finally:
            await policy.close(session)

        self.conclude(session)
        logger.info(f"Character {character['id']} battle ended: {session.state.value} "
                    f"after {session.round} rounds")
        return session.outcome()

    async def player_turn(self, session: BattleSession, policy: ActionPolicy, skills: Sequence):
        session.log.append(f"\n**Round {session.round}**")
        rejected = set()

        while True:
            offered = [skill for skill in skills if skill.id not in rejected]
            action = await policy.choose_action(session, offered)

            if action is None:
                session.log.append("⏰ You took too long to act!")
                session.transition(BattleEvent.TIMED_OUT)
                return

            if action.kind is ActionKind.FLEE:
                session.log.append("🏃 You fled from battle!")
                session.transition(BattleEvent.PLAYER_FLED)
                return

            if action.kind is ActionKind.SKILL:
                if not await self.resolve_skill(session, action.skill_id, offered):
                    # Not enough mana: the turn is not used up
                    rejected.add(action.skill_id)
                    continue
            else:
                self.basic_attack(session)

            session.transition(BattleEvent.PLAYER_ACTED)
            return

    def basic_attack(self, session: BattleSession):
        player, enemy = session.player, session.enemy
        attack = compute_attack(player, enemy, self.rng)

        if attack.was_dodged:
            session.log.append(f"🌀 {enemy.name} dodges your attack!")
            return

        enemy.health = max(0, enemy.health - attack.damage)
        if attack.is_critical:
            session.log.append(f"🎯 **CRITICAL!** You strike for {attack.damage} damage! "
                               f"({enemy.name}: {enemy.health}/{enemy.max_health} HP)")
        else:
            session.log.append(f"🗡️ You attack for {attack.damage} damage. "
                               f"({enemy.name}: {enemy.health}/{enemy.max_health} HP)")

    async def resolve_skill(self, session: BattleSession, skill_id, skills: Sequence) -> bool:
        """
        Apply a skill action. Returns False only when the skill was refused
        for lack of mana; unknown or unlearned skills become a basic attack.
        """
        player, enemy = session.player, session.enemy
        skill = next((skill for skill in skills if skill.id == skill_id), None)

        if skill is None:
            session.log.append("❌ Invalid skill! Using basic attack.")
            self.basic_attack(session)
            return True

        result = await self.skill_handler.use_skill(player.character_id, skill_id, enemy)

        if result.remaining_mana is not None:
            player.mana = result.remaining_mana

        if result.success:
            session.log.append(f"✨ You use {skill.name}: {result.message}")
            if result.damage:
                enemy.health = max(0, enemy.health - result.damage)
            if result.healing:
                player.health = min(player.max_health, player.health + result.healing)
            return True

        if result.failure is SkillFailure.INSUFFICIENT_MANA:
            session.log.append(f"❌ Not enough mana for {skill.name}! Choose another action.")
            return False

        session.log.append(f"❌ Failed to use {skill.name}: {result.message}. Using basic attack.")
        self.basic_attack(session)
        return True

    def enemy_turn(self, session: BattleSession):
        player, enemy = session.player, session.enemy
        attack = compute_attack(enemy, player, self.rng)

        if attack.was_dodged:
            session.log.append(f"🍃 You dodged {enemy.name}'s attack!")
        else:
            player.health = max(0, player.health - attack.damage)
            method = self.rng.choice(enemy.archetype.attack_phrases)
            if attack.is_critical:
                session.log.append(f"💥 **CRITICAL!** {enemy.name} {method} for {attack.damage} damage! "
                                   f"(You: {player.health}/{player.max_health} HP)")
            else:
                session.log.append(f"💥 {enemy.name} {method} for {attack.damage} damage. "
                                   f"(You: {player.health}/{player.max_health} HP)")

        session.transition(BattleEvent.ENEMY_ACTED)

    def conclude(self, session: BattleSession):
        enemy = session.enemy.archetype
        state = session.state

        if state is BattleState.VICTORY:
            session.log.append(f"🏆 **VICTORY!** You defeated the {enemy.name}! {enemy.death_phrase.capitalize()}.")
        elif state is BattleState.DEFEAT:
            session.log.append(f"☠️ **DEFEAT!** The {enemy.name} has bested you...")
        elif state is BattleState.ROUND_CAP_REACHED:
            session.log.append(f"🕒 The battle was interrupted after {session.round} rounds!")
        elif state is BattleState.TIMED_OUT:
            session.log.append("⏰ You stopped responding and the battle ended.")

        session.log.append(f"Final HP - You: {session.player.health}/{session.player.max_health} | "
                           f"{enemy.name}: {session.enemy.health}/{enemy.health}")
