"""
Script to create shop staff accounts

Usage:
    python scripts/create_user.py \
        --username ravi \
        --password secure123 \
        --full-name "Ravi Kumar" \
        --role technician
"""
import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import asyncio
import argparse
from repairdesk.database import MongoUserRepository, close_connection, ensure_indexes
from repairdesk.models import UserCreate, UserRole


async def create_user(username: str, password: str, full_name: str, role: str, email: str = None, phone: str = None):
    """
    Create a staff account

    Args:
        username: Login name
        password: Plain text password (will be hashed)
        full_name: Full name
        role: frontdesk or technician
        email: Optional e-mail address
        phone: Optional phone number
    """
    await ensure_indexes()
    users = MongoUserRepository()

    # Check if user exists
    existing = await users.get_by_username(username)
    if existing:
        print(f"❌ User {username} already exists")
        print(f"   User ID: {existing.id}")
        print(f"   Role:    {existing.role.value}")
        return

    user = await users.create(UserCreate(
        username=username,
        password=password,
        role=UserRole(role),
        full_name=full_name,
        email=email,
        phone=phone,
    ))

    print(f"\n✅ User created successfully!")
    print(f"━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    print(f"User ID:     {user.id}")
    print(f"Username:    {user.username}")
    print(f"Full Name:   {user.full_name}")
    print(f"Role:        {user.role.value}")
    print(f"━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
    print(f"\n🔐 Log in at POST /api/auth/login with username, password and role \"{user.role.value}\"")
    print(f"\n⚠️  IMPORTANT: Save these credentials securely.")

    await close_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Create a staff account for the repair desk",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create front desk user
  python scripts/create_user.py \\
      --username desk \\
      --password Desk123! \\
      --full-name "Front Desk" \\
      --role frontdesk

  # Create technician
  python scripts/create_user.py \\
      --username ravi \\
      --password Tech123! \\
      --full-name "Ravi Kumar"
        """
    )
    parser.add_argument("--username", required=True, help="Login name")
    parser.add_argument("--password", required=True, help="User password (plain text)")
    parser.add_argument("--full-name", required=True, help="User's full name")
    parser.add_argument(
        "--role",
        default="technician",
        choices=[role.value for role in UserRole],
        help="User role (default: technician)"
    )
    parser.add_argument("--email", default=None, help="E-mail address")
    parser.add_argument("--phone", default=None, help="Phone number")
    args = parser.parse_args()

    asyncio.run(create_user(
        username=args.username,
        password=args.password,
        full_name=args.full_name,
        role=args.role,
        email=args.email,
        phone=args.phone,
    ))
