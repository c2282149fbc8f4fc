import os

basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-chama-ledger-secret-key'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'chama_ledger.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # 'sql' reads from the database, 'fixture' serves the bundled sample data
    DATA_SOURCE = os.environ.get('DATA_SOURCE', 'sql')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Welfare fund: fixed amount banked per completed cycle
    WELFARE_CONTRIBUTION_PER_CYCLE = int(os.environ.get('WELFARE_CONTRIBUTION_PER_CYCLE', 1000))
    WELFARE_TOTAL_CYCLES = int(os.environ.get('WELFARE_TOTAL_CYCLES', 12))

    INVITE_CODE_PREFIX = 'JNG'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    DATA_SOURCE = 'sql'
    LOG_LEVEL = 'DEBUG'
