"""
Sample group data.

Served by the fixture data source when no database is configured,
and loaded into the database by `flask seed-demo`.
Field names match the database columns.
"""

FIXTURE_MEMBER_NAMES = [
    'Orpah Achieng',
    'Shadrack Otieno',
    'Ketty Awino',
    'Eunice Anyango',
    'Helida Auma',
    'Moses Omondi',
    'Sipora Adhiambo',
    'Timothy Ongeche',
    'Peres Atieno',
    'Mitchell Achieng',
    'Rosa Awuor',
    'Quinter Atieno',
]

FIXTURE_PAYOUT_DATES = [
    '2025-12-15', '2025-12-30',
    '2026-01-15', '2026-01-30',
    '2026-02-15', '2026-02-28',
    '2026-03-15', '2026-03-30',
    '2026-04-15', '2026-04-30',
    '2026-05-15', '2026-05-30',
]

FIXTURE_PAYOUT_AMOUNT = 5000
FIXTURE_CONTRIBUTION_AMOUNT = 500

FIXTURE_MEMBERS = [
    {
        'id': index,
        'name': name,
        'email': name.split()[0].lower() + '@example.com',
        'role': 'admin' if index == 1 else 'member',
        'status': 'active',
        'turn_number': index,
        'join_date': '2025-12-01',
    }
    for index, name in enumerate(FIXTURE_MEMBER_NAMES, start=1)
]

FIXTURE_PAYOUTS = [
    {
        'id': index,
        'cycle_number': index,
        'member_id': index,
        'date': payout_date,
        'amount': FIXTURE_PAYOUT_AMOUNT,
        'members': {'name': FIXTURE_MEMBER_NAMES[index - 1]},
    }
    for index, payout_date in enumerate(FIXTURE_PAYOUT_DATES, start=1)
]

# Every member paid in for the first two cycles
FIXTURE_CONTRIBUTIONS = [
    {
        'id': (member['id'] - 1) * 2 + cycle,
        'member_id': member['id'],
        'amount': FIXTURE_CONTRIBUTION_AMOUNT,
        'date': FIXTURE_PAYOUT_DATES[cycle - 1],
        'cycle_number': cycle,
    }
    for member in FIXTURE_MEMBERS
    for cycle in (1, 2)
]

FIXTURE_PROJECTS = [
    {
        'id': 1,
        'code': 'JGF',
        'name': 'Community Fish Farming',
        'description': 'Sustainable tilapia farming initiative to provide income and nutrition for the community.',
        'status': 'active',
        'start_date': '2025-06-01',
        'member_count': 8,
    },
    {
        'id': 2,
        'code': 'JPP',
        'name': 'Poultry Keeping Project',
        'description': 'Egg and broiler production for local markets and group consumption.',
        'status': 'active',
        'start_date': '2025-09-15',
        'member_count': 5,
    },
]
