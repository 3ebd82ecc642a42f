import textwrap
from collections.abc import Callable

import pytest

HEADER = textwrap.dedent(
    """\
    OFXHEADER:100
    DATA:OFXSGML
    VERSION:102
    SECURITY:NONE
    ENCODING:USASCII
    CHARSET:1252
    COMPRESSION:NONE
    OLDFILEUID:NONE
    NEWFILEUID:NONE

    """
)

BODY = textwrap.dedent(
    """\
    <OFX>
      <SIGNONMSGSRSV1>
        <SONRS>
          <STATUS>
            <CODE>0</CODE>
            <SEVERITY>INFO</SEVERITY>
          </STATUS>
          <DTSERVER>20250604000000[-3:BRT]</DTSERVER>
          <LANGUAGE>POR</LANGUAGE>
          <FI>
            <ORG>Banco Exemplo</ORG>
            <FID>0341</FID>
          </FI>
        </SONRS>
      </SIGNONMSGSRSV1>
      <BANKMSGSRSV1>
        <STMTTRNRS>
          <TRNUID>1001</TRNUID>
          <STATUS>
            <CODE>0</CODE>
            <SEVERITY>INFO</SEVERITY>
          </STATUS>
          <STMTRS>
            <CURDEF>BRL</CURDEF>
            <BANKACCTFROM>
              <BANKID>0341</BANKID>
              <ACCTID>123456789</ACCTID>
              <ACCTTYPE>CHECKING</ACCTTYPE>
            </BANKACCTFROM>
            <BANKTRANLIST>
              <DTSTART>20250601000000[-3:BRT]</DTSTART>
              <DTEND>20250604000000[-3:BRT]</DTEND>
              <STMTTRN>
                <TRNTYPE>DEBIT</TRNTYPE>
                <DTPOSTED>{first_posted}</DTPOSTED>
                <TRNAMT>-100.00</TRNAMT>
                <FITID>TX-1</FITID>
                <NAME>Padaria</NAME>
                <MEMO>Cafe da manha</MEMO>
              </STMTTRN>
              <STMTTRN>
                <TRNTYPE>CREDIT</TRNTYPE>
                <DTPOSTED>20250603120000[-3:BRT]</DTPOSTED>
                <TRNAMT>2000.00</TRNAMT>
                <FITID>TX-2</FITID>
                <NAME>Salario</NAME>
              </STMTTRN>
            </BANKTRANLIST>
            <LEDGERBAL>
              <BALAMT>1900.00</BALAMT>
              <DTASOF>20250604000000[-3:BRT]</DTASOF>
            </LEDGERBAL>
          </STMTRS>
        </STMTTRNRS>
      </BANKMSGSRSV1>
    </OFX>
    """
)

SGML_BODY = textwrap.dedent(
    """\
    <OFX>
    <SIGNONMSGSRSV1>
    <SONRS>
    <STATUS>
    <CODE>0
    <SEVERITY>INFO
    </STATUS>
    <DTSERVER>20240115083000[-5:EST]
    </SONRS>
    </SIGNONMSGSRSV1>
    <BANKMSGSRSV1>
    <STMTTRNRS>
    <TRNUID>0
    <STATUS>
    <CODE>0
    <SEVERITY>INFO
    </STATUS>
    <STMTRS>
    <CURDEF>USD
    <BANKACCTFROM>
    <BANKID>121000248
    <ACCTID>5555
    <ACCTTYPE>SAVINGS
    </BANKACCTFROM>
    <BANKTRANLIST>
    <DTSTART>20240101000000[-5:EST]
    <DTEND>20240115000000[-5:EST]
    <STMTTRN>
    <TRNTYPE>INT
    <DTPOSTED>20240110000000[-5:EST]
    <TRNAMT>1.23
    <FITID>INT-20240110
    <NAME>Interest
    </STMTTRN>
    </BANKTRANLIST>
    </STMTRS>
    </STMTTRNRS>
    </BANKMSGSRSV1>
    </OFX>
    """
)


def build_document(*, header: str = HEADER, first_posted: str = '20250602000000[-3:BRT]') -> str:
    return header + BODY.format(first_posted=first_posted)


@pytest.fixture
def sample_text() -> str:
    return build_document()


@pytest.fixture
def sgml_text() -> str:
    return HEADER + SGML_BODY


@pytest.fixture
def make_document() -> Callable[..., str]:
    return build_document
