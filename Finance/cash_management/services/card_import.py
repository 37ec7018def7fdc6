"""
Card Import Service
Handles parsing and importing payment cards from Excel/CSV files.
"""
import io
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

import pandas as pd
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone


class CardImporter:
    """
    Service class for importing cards onto one bank account.

    HOW IT WORKS:
    =============

    1. FILE UPLOAD:
       - User uploads Excel (.xlsx, .xls) or CSV (.csv) file
       - Every cell is read as text so card numbers keep their digits

    2. COLUMN MAPPING:
       - Supports several names per field ("Card Number", "PAN", "Number")
       - Expiry can be two columns (month/year) or one "MM/YY" column

    3. DATA VALIDATION:
       - 16 digit number, 3-4 digit CVV, month 1-12, year not in the past
       - Duplicates inside the file and against existing cards

    4. PREVIEW MODE:
       - Returns parsed rows and row-level errors without saving

    5. IMPORT MODE:
       - Creates Card + CardSecret rows in one transaction (all-or-nothing)
    """

    COLUMN_MAPPINGS = {
        'card_number': ['card_number', 'card', 'number', 'pan', 'card_no'],
        'cvv': ['cvv', 'cvc', 'cvv2', 'security_code'],
        'exp_month': ['exp_month', 'month', 'expiry_month', 'mm'],
        'exp_year': ['exp_year', 'year', 'expiry_year', 'yy', 'yyyy'],
        'expiry': ['expiry', 'exp', 'expiration', 'exp_date', 'valid_thru'],
        'card_type': ['card_type', 'type', 'color'],
        'daily_limit': ['daily_limit', 'limit'],
    }

    EXPIRY_RE = re.compile(r'^\s*(\d{1,2})\s*[/\-.]\s*(\d{2}|\d{4})\s*$')

    def __init__(self, file_obj, bank_account_id: int, user):
        """
        Args:
            file_obj: Uploaded file object
            bank_account_id: Account the cards are issued on
            user: User performing the import
        """
        self.file_obj = file_obj
        self.bank_account_id = bank_account_id
        self.user = user
        self.errors = []
        self.warnings = []
        self.df = None

    def read_file(self) -> bool:
        """
        Read file into pandas DataFrame.

        Returns:
            bool: True if successful, False otherwise
        """
        file_name = self.file_obj.name.lower()
        content = io.BytesIO(self.file_obj.read())
        try:
            if file_name.endswith('.csv'):
                self.df = pd.read_csv(content, dtype=str)
            elif file_name.endswith(('.xlsx', '.xls')):
                self.df = pd.read_excel(content, dtype=str)
            else:
                self.errors.append({
                    'row': 'File',
                    'error': 'Unsupported file format. Please upload .csv, .xlsx, or .xls file'
                })
                return False
        except (ValueError, OSError, pd.errors.ParserError) as e:
            self.errors.append({'row': 'File', 'error': f'Error reading file: {e}'})
            return False

        self.df.columns = [str(col).strip().lower() for col in self.df.columns]

        if self.df.empty:
            self.errors.append({'row': 'File', 'error': 'File is empty or has no data rows'})
            return False

        return True

    def _find_column(self, field_name: str) -> Optional[str]:
        """Case/spacing-insensitive lookup of the column holding ``field_name``."""
        possible = [name.replace('_', '').replace(' ', '') for name in self.COLUMN_MAPPINGS.get(field_name, [])]
        for col_name in self.df.columns:
            normalized = str(col_name).lower().replace('_', '').replace(' ', '')
            if normalized in possible:
                return col_name
        return None

    @staticmethod
    def _clean(value) -> str:
        if value is None or pd.isna(value):
            return ''
        text = str(value).strip()
        # Excel numbers read as text may carry a trailing ".0"
        if text.endswith('.0') and text[:-2].isdigit():
            text = text[:-2]
        return text

    def _parse_expiry(self, row_data: Dict):
        month = row_data.get('exp_month')
        year = row_data.get('exp_year')
        if (not month or not year) and row_data.get('expiry'):
            match = self.EXPIRY_RE.match(row_data['expiry'])
            if match:
                month, year = match.group(1), match.group(2)
        try:
            month = int(month)
            year = int(year)
        except (TypeError, ValueError):
            return None, None
        if year < 100:
            year += 2000
        return month, year

    def parse_data(self) -> Dict:
        """
        Validate every row.

        Returns:
            Dict: {'cards': [...valid rows...], 'summary': {...}}
        """
        from Finance.cash_management.models import Card

        parsed = {
            'cards': [],
            'summary': {'total_rows': 0, 'valid_rows': 0, 'error_rows': 0},
        }

        column_map = {}
        for field in self.COLUMN_MAPPINGS:
            found = self._find_column(field)
            if found:
                column_map[field] = found

        missing = [field for field in ('card_number', 'cvv') if field not in column_map]
        if 'expiry' not in column_map and not ('exp_month' in column_map and 'exp_year' in column_map):
            missing.append('exp_month/exp_year or expiry')
        if missing:
            self.errors.append({'row': 'File', 'error': f'Missing required columns: {", ".join(missing)}'})
            return parsed

        current_year = timezone.now().year
        seen_masks = set()
        existing_masks = set(Card.objects.values_list('card_number_mask', flat=True))

        for idx, row in self.df.iterrows():
            row_num = idx + 2  # header is row 1
            parsed['summary']['total_rows'] += 1
            row_data = {field: self._clean(row[col]) for field, col in column_map.items()}

            if not any(row_data.values()):
                continue

            row_errors = []
            number = row_data.get('card_number', '').replace(' ', '')
            cvv = row_data.get('cvv', '')
            month, year = self._parse_expiry(row_data)

            if not re.fullmatch(r'\d{16}', number):
                row_errors.append('Card number must contain 16 digits')
            if not re.fullmatch(r'\d{3,4}', cvv):
                row_errors.append('CVV must contain 3-4 digits')
            if month is None or not 1 <= month <= 12:
                row_errors.append('Invalid expiry month')
            if year is None or year < current_year:
                row_errors.append('Card has already expired')

            card_type = (row_data.get('card_type') or Card.TYPE_GREY).lower()
            if card_type not in (Card.TYPE_GREY, Card.TYPE_PINK):
                row_errors.append(f'Unknown card type "{card_type}"')

            daily_limit = None
            if row_data.get('daily_limit'):
                try:
                    daily_limit = Decimal(row_data['daily_limit'].replace(',', ''))
                except InvalidOperation:
                    row_errors.append('Invalid daily limit')

            mask = Card.mask_number(number) if len(number) == 16 else None
            if mask and (mask in existing_masks or mask in seen_masks):
                row_errors.append(f'Card {mask} already exists')

            if row_errors:
                parsed['summary']['error_rows'] += 1
                for error in row_errors:
                    self.errors.append({'row': row_num, 'error': error})
                continue

            seen_masks.add(mask)
            parsed['cards'].append({
                'row_number': row_num,
                'card_number': number,
                'card_number_mask': mask,
                'card_bin': Card.bin_of(number),
                'cvv': cvv,
                'exp_month': month,
                'exp_year': year,
                'card_type': card_type,
                'daily_limit': daily_limit,
            })
            parsed['summary']['valid_rows'] += 1

        return parsed

    def preview_import(self) -> Dict:
        """
        Preview import without saving to database.
        Card numbers are returned masked only.
        """
        if not self.read_file():
            return {'success': False, 'errors': self.errors, 'warnings': self.warnings}

        parsed = self.parse_data()
        preview = [
            {key: value for key, value in card.items() if key not in ('card_number', 'cvv')}
            for card in parsed['cards'][:10]
        ]
        return {
            'success': len(self.errors) == 0,
            'cards_preview': preview,
            'total_cards': len(parsed['cards']),
            'summary': parsed['summary'],
            'errors': self.errors,
            'warnings': self.warnings,
        }

    @transaction.atomic
    def import_cards(self) -> Dict:
        """
        Create every card from the file, or nothing when any row is invalid.

        Raises:
            ValidationError: unreadable file, row errors or no rows
        """
        from Finance.cash_management.models import BankAccount, Card, CardSecret

        try:
            bank_account = BankAccount.objects.get(id=self.bank_account_id)
        except BankAccount.DoesNotExist:
            raise ValidationError(f'Bank account with ID {self.bank_account_id} not found')

        if not self.read_file():
            raise ValidationError('Failed to read file')

        parsed = self.parse_data()
        if self.errors:
            raise ValidationError(f'File has {len(self.errors)} validation errors')
        if not parsed['cards']:
            raise ValidationError('No valid cards found in file')

        status = Card.initial_status_for(bank_account)
        created = []
        for row in parsed['cards']:
            card = Card.objects.create(
                bank_account=bank_account,
                card_number_mask=row['card_number_mask'],
                card_bin=row['card_bin'],
                card_type=row['card_type'],
                exp_month=row['exp_month'],
                exp_year=row['exp_year'],
                status=status,
                daily_limit=row['daily_limit'],
            )
            CardSecret.objects.create(card=card, pan=row['card_number'], cvv=row['cvv'])
            created.append(card)

        return {
            'success': True,
            'cards': created,
            'cards_created': len(created),
            'summary': parsed['summary'],
        }
