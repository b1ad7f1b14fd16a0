"""
Centralized Italian UI messages.
All user-facing text in Italian for consistency.
"""

MESSAGES = {
    # Success messages
    'login_success': 'Benvenuto {name}',
    'logout_success': 'Sessione chiusa',
    'booking_created': 'Prenotazione creata',
    'booking_series_created': 'Prenotate {booked} settimane su {requested}',
    'booking_updated': 'Prenotazione aggiornata',
    'booking_deleted': 'Prenotazione eliminata',
    'booking_already_deleted': 'La prenotazione non esiste più',

    # Error messages
    'invalid_credentials': 'Utente o password non corretti',
    'account_disabled': 'Il tuo account è stato disattivato. Contatta un amministratore.',
    'login_required': 'Effettua il login per continuare',
    'data_required': 'Dati obbligatori',
    'slot_taken': 'Orario già occupato per questa risorsa.',
    'series_all_taken': 'Orario già occupato per questa risorsa in tutte le settimane richieste.',
    'booking_not_found': 'Prenotazione non trovata',
    'permission_denied_edit': 'Non hai permessi per modificare questa prenotazione.',
    'permission_denied_delete': 'Non hai permessi per eliminare questa prenotazione.',
    'squad_not_allowed': 'Non puoi prenotare per questa squadra.',
    'replace_failed': (
        'La prenotazione originale è stata eliminata ma quella nuova non è stata creata. '
        'Ricrea la prenotazione.'
    ),
    'internal_error': 'Errore interno del server',
    'not_found': 'Risorsa richiesta non trovata',
}
