"""TicketTango: event ticket booking over embedded or server storage."""
