from rich.pretty import pprint

from switchyard import *

schema = (
    SchemaBuilder()
    .flag("first", short="x", long=True)
    .option("second", short=True, long="sec", type=i64)
    .positional("pos")
    .positional("count", type=u8)
    .build()
)


if __name__ == '__main__':
    pprint(schema.parse_or_exit())
