"""
Session manager — owns the process-wide authentication state.

The manager turns credential-store sessions into a published AuthState:

    credential store ──session──> reconciliation ──profile──> AuthState ──> listeners

State transitions:

    Bootstrapping ──> Anonymous | Client | Bank      (bootstrap finished)
    Anonymous     ──> Client | Bank                  (login / signup)
    Client | Bank ──> Anonymous                      (logout / stream sign-out)

Client and Bank never switch directly; a logout comes first.

Concurrency:
  Everything runs on one event loop. Two sources race to publish state: the
  one-shot bootstrap and the credential store's change stream. Every
  reconciliation takes a generation number when it starts and publishes
  only if no newer reconciliation (or sign-out) has started since, so a
  slow bootstrap cannot resurrect a session that was signed out meanwhile.
  Starting a login or signup does not take a number; a failed attempt
  leaves an in-flight bootstrap to finish, or reconciles in its place.

  Change notifications are handled on a later loop turn (as tasks), never
  inside the store's own callback. While login() or signup() is running
  the stream is ignored; those operations reconcile on their own when done.
  A failed attempt puts the session held before it back into the store.

  A fallback timer bounds bootstrap: if loading hasn't finished when it
  fires, loading is switched off and the app carries on signed out. The
  timer only flips the flag; it does not cancel the underlying requests,
  and a bootstrap that finishes later still publishes its result.

Errors:
  login() and signup() raise domain errors to the caller. A profile that
  can't be loaded during reconciliation is not raised; it is kept in
  profile_error and the user is treated as signed out.
"""

import asyncio
import logging
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

from app.config import settings
from app.exceptions import (
    AccountNumberRequiredError,
    BankAndCodeRequiredError,
    CreditScoreError,
    CredentialStoreError,
    InvalidAccountNumberError,
    InvalidVerificationCodeError,
    ProfileLoadFailure,
    ProfileNotFoundError,
    ProfileStoreError,
    RoleMismatchError,
)
from app.models.profile import Profile, UserType
from app.schemas.bank import RegistryEntry
from app.schemas.session import AuthState, ClientSummary, User
from app.services.credential_store import (
    AuthChangeEvent,
    CredentialStore,
    Session,
    Subscription,
)
from app.services.profile_store import ProfileStore
from app.services.verification_registry import VerificationCodeRegistry, default_registry

logger = logging.getLogger(__name__)

StateListener = Callable[[AuthState], None]


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

def project_user(profile: Profile) -> User:
    """Project a profile row into the published User shape."""
    latest = profile.credit_scores[0] if profile.credit_scores else None
    return User(
        id=profile.id,
        name=profile.name,
        email=profile.email,
        type=profile.user_type,
        bank=profile.bank_name or None,
        bank_id=profile.bank_id,
        account_number=profile.account_number or None,
        credit_score=latest.score if latest else None,
        risk_level=latest.risk_level if latest else None,
        is_verified=bool(profile.is_verified),
    )


def project_client(profile: Profile) -> ClientSummary:
    """Project a client profile for bank representatives."""
    latest = profile.credit_scores[0] if profile.credit_scores else None
    return ClientSummary(
        id=profile.id,
        name=profile.name,
        email=profile.email,
        type=profile.user_type,
        account_number=profile.account_number or None,
        credit_score=latest.score if latest else None,
        risk_level=latest.risk_level if latest else None,
    )


# ---------------------------------------------------------------------------
# Session manager
# ---------------------------------------------------------------------------

class SessionManager:
    """
    Owner of AuthState.

    Args:
        credential_store: Identity service (sign-in, sessions, change stream).
        profile_store: Profile and bank directory tables.
        registry: Bank verification codes used to gate bank logins.
        fallback_timeout: Seconds before bootstrap fails open. Defaults to
            settings.SESSION_FALLBACK_TIMEOUT_SECONDS.
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        profile_store: ProfileStore,
        registry: VerificationCodeRegistry = default_registry,
        fallback_timeout: float | None = None,
    ):
        self._credentials = credential_store
        self._profiles = profile_store
        self._registry = registry
        self._fallback_timeout = (
            settings.SESSION_FALLBACK_TIMEOUT_SECONDS
            if fallback_timeout is None
            else fallback_timeout
        )

        self._state = AuthState.bootstrapping()
        self._profile_error: str | None = None
        self._listeners: list[StateListener] = []

        self._subscription: Subscription | None = None
        self._fallback_timer: asyncio.TimerHandle | None = None
        self._bootstrap_task: asyncio.Task | None = None
        self._pending: set[asyncio.Task] = set()

        self._generation = 0
        self._operations = 0
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def state(self) -> AuthState:
        """Current snapshot. Re-read it after every await; don't cache it."""
        return self._state

    @property
    def profile_error(self) -> str | None:
        """Last profile-load failure, shown as a banner with a logout action."""
        return self._profile_error

    def dismiss_profile_error(self) -> None:
        self._profile_error = None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call listener with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self, state: AuthState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Auth state listener failed")

    def _set_loading(self, is_loading: bool) -> None:
        if self._state.is_loading != is_loading:
            self._publish(self._state.model_copy(update={"is_loading": is_loading}))

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Begin bootstrap: arm the fallback timer, subscribe to the change
        stream, and look up the current session in the background.

        Raises:
            RuntimeError: If called more than once.
        """
        if self._started:
            raise RuntimeError("Session manager has already been started")
        self._started = True

        loop = asyncio.get_running_loop()
        self._fallback_timer = loop.call_later(self._fallback_timeout, self._on_fallback_timeout)
        self._subscription = self._credentials.on_auth_state_change(self._on_auth_state_change)
        self._bootstrap_task = loop.create_task(self._bootstrap())

    async def close(self) -> None:
        """Unsubscribe, cancel the timer and any in-flight background work."""
        self._closed = True
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._cancel_fallback_timer()

        tasks = [t for t in (self._bootstrap_task, *self._pending) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)

    async def wait_idle(self) -> None:
        """Wait until bootstrap and every scheduled reconciliation have finished."""
        while True:
            tasks = [t for t in (self._bootstrap_task, *self._pending) if t is not None and not t.done()]
            if not tasks:
                return
            await asyncio.wait(tasks)

    def _cancel_fallback_timer(self) -> None:
        if self._fallback_timer is not None:
            self._fallback_timer.cancel()
            self._fallback_timer = None

    def _on_fallback_timeout(self) -> None:
        self._fallback_timer = None
        if self._state.is_loading:
            logger.warning(
                "Session bootstrap did not finish within %.1fs; continuing signed out",
                self._fallback_timeout,
            )
            self._set_loading(False)

    async def _bootstrap(self) -> None:
        generation = self._next_generation()
        try:
            session = await self._credentials.get_current_session()
        except CredentialStoreError as exc:
            logger.warning("Could not read the current session: %s", exc.detail)
            session = None

        if session is None:
            if generation == self._generation:
                self._publish(AuthState.anonymous())
            self._cancel_fallback_timer()
            return

        try:
            await self._reconcile(session.user.id, generation)
        finally:
            self._cancel_fallback_timer()

    # ------------------------------------------------------------------
    # Change stream
    # ------------------------------------------------------------------

    def _on_auth_state_change(self, event: AuthChangeEvent, session: Session | None) -> None:
        logger.info("Auth state changed: %s", event.value)
        if self._closed:
            return
        if self._operations:
            logger.debug("Ignoring %s while a login/signup is in flight", event.value)
            return

        if session is None:
            self._next_generation()
            self._publish(AuthState.anonymous())
            return

        self._defer(self._reconcile(session.user.id))

    def _defer(self, coro: Coroutine[Any, Any, Any]) -> None:
        """Run coro as a task, starting on a later loop turn."""
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Deferred reconciliation failed", exc_info=task.exception())

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def _reconcile(self, subject_id: uuid.UUID, generation: int | None = None) -> User | None:
        """
        Load the subject's profile and publish it.

        A missing profile or a store error publishes user=None and records
        the failure in profile_error. Loading is switched off on every exit
        path, but only if no newer attempt has started meanwhile and the
        manager is still open.
        """
        if generation is None:
            generation = self._next_generation()

        user: User | None = None
        failure: ProfileLoadFailure | None = None
        try:
            profile = await self._profiles.get_profile(subject_id)
            if profile is None:
                failure = ProfileLoadFailure("Profile not found or error: No profile")
            else:
                user = project_user(profile)
        except ProfileStoreError as exc:
            failure = ProfileLoadFailure(f"Profile not found or error: {exc.detail}")
        finally:
            if self._closed:
                logger.debug("Manager closed; not publishing reconciliation for %s", subject_id)
            elif generation != self._generation:
                logger.debug("Discarding stale reconciliation for %s", subject_id)
            else:
                if failure is not None:
                    logger.warning("Profile load failed for %s: %s", subject_id, failure.detail)
                    self._profile_error = failure.detail
                else:
                    self._profile_error = None
                self._publish(AuthState(user=user, is_loading=False))
        return user

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    async def login(
        self,
        email: str,
        password: str,
        role: UserType | str,
        bank: str | None = None,
        account_number: str | None = None,
        verification_code: str | None = None,
    ) -> bool:
        """
        Sign in and check the caller against their profile.

        Clients must present the account number stored on their profile.
        Bank representatives must present their bank's verification code;
        the first successful bank login for a bank marks the profile as
        verified for it.

        Raises:
            InvalidCredentialsError, ProfileNotFoundError, RoleMismatchError,
            AccountNumberRequiredError, InvalidAccountNumberError,
            BankAndCodeRequiredError, InvalidVerificationCodeError
        """
        role = UserType(role)
        previous = self._state
        previous_session = await self._read_current_session()
        self._operations += 1
        self._set_loading(True)
        authenticated = False
        try:
            session = await self._credentials.sign_in_with_password(email, password)
            authenticated = True
            subject_id = session.user.id

            profile = await self._profiles.get_profile(subject_id)
            if profile is None:
                raise ProfileNotFoundError()
            if profile.user_type != role:
                raise RoleMismatchError(profile.user_type.value, role.value)

            if role is UserType.CLIENT:
                if not account_number:
                    raise AccountNumberRequiredError()
                if profile.account_number != account_number:
                    raise InvalidAccountNumberError()
            else:
                await self._verify_bank(profile, bank, verification_code)

            await self._credentials.refresh_session()
            await self._reconcile(subject_id)
            logger.info("Login succeeded for %s as %s", subject_id, role.value)
            return True
        except Exception as exc:
            logger.warning("Login failed for %s: %s", email, getattr(exc, "detail", exc))
            await self._restore_after_failure(previous, previous_session, authenticated)
            raise
        finally:
            self._operations -= 1
            self._set_loading(False)

    async def _verify_bank(
        self,
        profile: Profile,
        bank: str | None,
        verification_code: str | None,
    ) -> None:
        if not bank or not verification_code:
            raise BankAndCodeRequiredError()
        if not self._registry.is_valid(bank, verification_code):
            raise InvalidVerificationCodeError()

        if profile.is_verified and profile.bank_name == bank:
            return

        bank_id = await self._profiles.get_bank_id(bank)
        if bank_id is None:
            logger.warning("Bank %r is not in the bank directory; profile left unverified", bank)
            return

        await self._profiles.update_profile(
            profile.id,
            {
                "bank_name": bank,
                "bank_id": bank_id,
                "is_verified": True,
                "verification_code": verification_code,
            },
        )
        logger.info("Profile %s verified for %s", profile.id, bank)

    async def signup(
        self,
        name: str,
        email: str,
        password: str,
        role: UserType | str,
        bank: str | None = None,
        account_number: str | None = None,
        verification_code: str | None = None,
    ) -> bool:
        """
        Create a credential and its profile, then sign in.

        The profile may already exist as a stub created by the credential
        store; it is updated in place, and inserted only when no row was
        affected.

        Raises:
            BankAndCodeRequiredError, InvalidVerificationCodeError: bank
                signups must carry their bank's code.
            SignupError: the credential store refused the new credential.
        """
        role = UserType(role)
        if role is UserType.BANK:
            if not bank or not verification_code:
                raise BankAndCodeRequiredError()
            if not self._registry.is_valid(bank, verification_code):
                raise InvalidVerificationCodeError()

        previous = self._state
        previous_session = await self._read_current_session()
        self._operations += 1
        self._set_loading(True)
        created = False
        try:
            session = await self._credentials.sign_up(
                email,
                password,
                {
                    "name": name,
                    "user_type": role.value,
                    "bank_name": bank,
                    "account_number": account_number,
                    "verification_code": verification_code,
                },
            )
            created = True
            subject_id = session.user.id

            patch: dict[str, Any] = {"user_type": role}
            if role is UserType.CLIENT and account_number:
                patch["account_number"] = account_number
            if role is UserType.BANK:
                bank_id = await self._profiles.get_bank_id(bank)
                if bank_id is not None:
                    patch.update(
                        bank_name=bank,
                        bank_id=bank_id,
                        is_verified=True,
                        verification_code=verification_code,
                    )
                else:
                    logger.warning("Bank %r is not in the bank directory; profile left unverified", bank)

            updated = await self._profiles.update_profile(subject_id, patch)
            if updated == 0:
                await self._profiles.insert_profile(
                    {"id": subject_id, "email": email, "name": name, **patch}
                )

            await self._credentials.refresh_session()
            await self._reconcile(subject_id)
            logger.info("Signup succeeded for %s as %s", subject_id, role.value)
            return True
        except Exception as exc:
            logger.warning("Signup failed for %s: %s", email, getattr(exc, "detail", exc))
            await self._restore_after_failure(previous, previous_session, created)
            raise
        finally:
            self._operations -= 1
            self._set_loading(False)

    async def _read_current_session(self) -> Session | None:
        try:
            return await self._credentials.get_current_session()
        except CredentialStoreError as exc:
            logger.warning("Could not read the current session: %s", exc.detail)
            return None

    async def _restore_after_failure(
        self,
        previous: AuthState,
        previous_session: Session | None,
        replaced: bool,
    ) -> None:
        """
        Put the credential store and AuthState back the way they were before
        a failed login/signup.

        If the store already switched to the new subject's session, the
        session held before the attempt is reinstated (or, when there was
        none, the new one is signed out). If the attempt started while
        bootstrap was still loading, the restored session is reconciled
        here instead of republishing the loading snapshot.
        """
        if replaced:
            if previous_session is not None:
                try:
                    await self._credentials.set_session(previous_session)
                except CreditScoreError as exc:
                    logger.warning("Could not reinstate the previous session: %s", exc.detail)
                    previous_session = None
                    previous = AuthState.anonymous()
            if previous_session is None:
                try:
                    await self._credentials.sign_out()
                except CreditScoreError as exc:
                    logger.warning("Could not discard half-open session: %s", exc.detail)

        if previous.is_loading:
            if previous_session is not None:
                await self._reconcile(previous_session.user.id)
                return
            previous = AuthState.anonymous()

        if previous_session is None:
            # Nothing is signed in, so any reconciliation still running is stale.
            self._next_generation()
        self._publish(previous.model_copy(update={"is_loading": False}))

    async def logout(self) -> None:
        """
        Sign out. The user is cleared even when the credential store call
        fails; that failure is still raised afterwards.
        """
        try:
            await self._credentials.sign_out()
        finally:
            self._next_generation()
            self._profile_error = None
            self._publish(AuthState.anonymous())

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    async def get_client_by_account_number(self, account_number: str) -> ClientSummary | None:
        """Look up a client by account number; None when there is no single match."""
        profile = await self._profiles.get_client_by_account_number(account_number)
        if profile is None:
            return None
        return project_client(profile)

    def get_bank_list(self) -> list[RegistryEntry]:
        return self._registry.list()

    def get_verification_code(self, bank_name: str) -> str:
        return self._registry.code_for(bank_name)

    def is_valid_verification_code(self, bank_name: str, code: str) -> bool:
        return self._registry.is_valid(bank_name, code)
