"""Navigator Wallet Meta information.
   Navigator Wallet keeps keys and identities behind an unlocked session.
"""
__title__ = 'navigator_wallet'
__description__ = (
   'Navigator Wallet keeps keys and identities behind an unlocked '
   'session and authorizes what external domains may see or sign.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-wallet'
