"""
Interactive CLI for the Vitamin D Camp Portal.
Log in with an IMACX ID and browse the doctors available for camp creation.
"""

from camp_portal.database import init_engine
from camp_portal.errors import NotFound, StoreError
from camp_portal.identity import resolve_identity
from camp_portal.scope import list_eligible_doctors
from camp_portal.session_store import IdentityStore


def print_listing(listing):
    print(f"\n[scope] Territories: {listing.scope_description or '(none)'}")
    if listing.warning:
        print(f"[WARN] {listing.warning.code}: {listing.warning.message}")
    if not listing.doctors:
        print("(no doctors available)")
        return
    for doctor in listing.doctors:
        print(f"  - {doctor.name} • {doctor.clinic_name or 'N/A'}, {doctor.city or 'N/A'} [{doctor.territory}]")
    print(f"{len(listing.doctors)} doctor{'s' if len(listing.doctors) != 1 else ''} available")


def main():
    print("=== Vitamin D Camp Portal: Territory Doctor Lookup ===\n")

    engine = init_engine()
    store = IdentityStore({})

    # ── Login ────────────────────────────────────────────────────────
    try:
        imacx_id = input("Enter your IMACX ID (or 'quit'): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    if not imacx_id or imacx_id.lower() in {"quit", "exit"}:
        print("Goodbye.")
        return

    try:
        identity = resolve_identity(engine, imacx_id, store=store)
    except (NotFound, StoreError) as e:
        print("\n[ERROR] Login failed.")
        print("Details:", e)
        return

    print(f"\n[auth] Logged in as: {identity.display_name} (role={identity.role}, id={identity.id})")

    # ── REPL ─────────────────────────────────────────────────────────
    while True:
        try:
            cmd = input("\nPress Enter to list doctors, 'logout' or 'quit': ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if cmd in {"quit", "exit"}:
            print("Goodbye.")
            break
        if cmd == "logout":
            store.clear()
            print("You have been logged out successfully.")
            break

        current = store.read()
        if current is None:
            print("[auth] Session expired. Please log in again.")
            break
        try:
            print_listing(list_eligible_doctors(engine, current))
        except StoreError as e:
            print("\n[DB ERROR] Error fetching doctors.")
            print("Details:", e)


if __name__ == "__main__":
    main()
